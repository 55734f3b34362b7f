# -*- coding: utf-8 -*-
"""
基于 Pillow 的图片转换器
"""

import asyncio
import time
import uuid
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps

from astrbot.api import logger

from core.compression.format import ImageEncoding
from core.compression.policy import ResizeSpec
from core.exceptions import TransformationError
from core.interfaces import Transformer
from core.models import DerivedArtifact
from core.uri import local_path_from_uri

# PNG 可直接保存的模式
PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"}


class PillowTransformer(Transformer):
    """缩放并重新编码图片，结果写入输出目录"""

    def __init__(self, output_dir: Path):
        """
        初始化转换器

        Args:
            output_dir: 压缩结果输出目录
        """
        self.output_dir = output_dir

    async def transform(
        self,
        uri: str,
        resize: Optional[ResizeSpec],
        quality: float,
        encoding: ImageEncoding,
    ) -> DerivedArtifact:
        """转换图片（异步包装器）"""
        # 将同步的PIL操作放到线程池中执行
        return await asyncio.to_thread(
            self._transform_sync, uri, resize, quality, encoding
        )

    def _transform_sync(
        self,
        uri: str,
        resize: Optional[ResizeSpec],
        quality: float,
        encoding: ImageEncoding,
    ) -> DerivedArtifact:
        """同步转换图片"""
        try:
            with Image.open(local_path_from_uri(uri)) as img:
                img.load()
                # 按 EXIF 方向摆正，输出文件不再携带方向标记
                img = ImageOps.exif_transpose(img)
                original_size = img.size

                if resize is not None:
                    img = self._resize_image(img, resize)

                if encoding is ImageEncoding.JPEG:
                    img = self._flatten_alpha(img)
                else:
                    img = self._normalize_for_png(img)

                self.output_dir.mkdir(parents=True, exist_ok=True)
                output_path = (
                    self.output_dir
                    / f"{int(time.time())}_{uuid.uuid4().hex[:8]}.{encoding.extension}"
                )

                save_params = {"format": encoding.pil_format, "optimize": True}
                if encoding is ImageEncoding.JPEG:
                    save_params["quality"] = self._pil_quality(quality)
                img.save(output_path, **save_params)

                width, height = img.size

            logger.info(
                f"图片压缩完成: {original_size[0]}x{original_size[1]} -> "
                f"{width}x{height}, 格式: {encoding.value}, 输出: {output_path}"
            )
            return DerivedArtifact(
                uri=str(output_path),
                width=width,
                height=height,
                encoding=encoding,
            )

        except Exception as e:
            logger.error(f"图片压缩失败: {e}")
            raise TransformationError(f"图片压缩失败: {e}") from e

    @staticmethod
    def _pil_quality(quality: float) -> int:
        """将 0-1 的质量映射为 Pillow 的 1-100"""
        return max(1, min(100, round(quality * 100)))

    def _resize_image(self, img: Image.Image, resize: ResizeSpec) -> Image.Image:
        """
        调整图片尺寸（未指定高度时保持比例）

        Args:
            img: PIL图片对象
            resize: 缩放参数

        Returns:
            调整后的图片
        """
        width = max(1, resize.width)
        if resize.height is not None:
            height = max(1, resize.height)
        else:
            height = max(1, round(img.size[1] * width / img.size[0]))
        return img.resize((width, height), Image.Resampling.LANCZOS)

    def _normalize_for_png(self, img: Image.Image) -> Image.Image:
        """PNG 无法保存 CMYK 等模式，转换为 RGB/RGBA"""
        if img.mode in PNG_MODES:
            return img
        has_alpha = "A" in img.getbands() or "transparency" in img.info
        return img.convert("RGBA" if has_alpha else "RGB")

    def _flatten_alpha(self, img: Image.Image) -> Image.Image:
        """JPEG 不支持透明通道，铺白色背景"""
        if img.mode in ("RGBA", "LA", "P"):
            if img.mode != "RGBA":
                img = img.convert("RGBA")
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        if img.mode not in ("RGB", "L"):
            return img.convert("RGB")
        return img
