# -*- coding: utf-8 -*-
"""
图片格式枚举和检测工具
"""

from enum import Enum
from typing import Optional

import io
from PIL import Image, ImageOps

from astrbot.api import logger


class ImageFormat(Enum):
    """原图格式枚举"""

    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"
    BMP = "bmp"
    UNKNOWN = "unknown"

    @staticmethod
    def from_pil_format(pil_format: str | None) -> "ImageFormat":
        """
        从PIL格式转换为ImageFormat

        Args:
            pil_format: PIL的format属性值

        Returns:
            对应的ImageFormat枚举
        """
        if not pil_format:
            return ImageFormat.UNKNOWN

        format_map = {
            "JPEG": ImageFormat.JPEG,
            "PNG": ImageFormat.PNG,
            "GIF": ImageFormat.GIF,
            "WEBP": ImageFormat.WEBP,
            "BMP": ImageFormat.BMP,
        }
        return format_map.get(pil_format.upper(), ImageFormat.UNKNOWN)

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else self.value


class ImageEncoding(Enum):
    """压缩输出编码"""

    JPEG = "jpeg"
    PNG = "png"

    @property
    def pil_format(self) -> str:
        return self.name

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageEncoding.JPEG else "png"


def detect_image(content: bytes) -> tuple[ImageFormat, Optional[int], Optional[int]]:
    """
    检测图片格式和尺寸

    Args:
        content: 图片内容

    Returns:
        (格式类型, 宽度, 高度)
        检测失败时返回 (ImageFormat.UNKNOWN, None, None)
    """
    try:
        # 使用上下文管理器确保图像对象正确关闭
        with Image.open(io.BytesIO(content)) as img:
            format_type = ImageFormat.from_pil_format(img.format)
            # 尺寸按 EXIF 方向摆正后的显示尺寸计算
            width, height = ImageOps.exif_transpose(img).size
            return format_type, width or None, height or None
    except Exception as e:
        logger.warning(f"图片格式检测失败，尺寸未知: {e}")
        return ImageFormat.UNKNOWN, None, None
