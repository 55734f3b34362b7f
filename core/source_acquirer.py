# -*- coding: utf-8 -*-
"""
从聊天消息中获取原图
"""

import asyncio
import time
import uuid
from pathlib import Path
from typing import Any, List, Optional

from astrbot.api import logger

from core.compression.format import ImageFormat, detect_image
from core.image_downloader import ImageDownloader
from core.interfaces import SourceAcquirer
from core.models import SourceImage
from core.uri import local_path_from_uri


class MessageImageAcquirer(SourceAcquirer):
    """取消息中第一张可读取的图片作为原图"""

    def __init__(
        self,
        images: List[Any],
        downloader: ImageDownloader,
        work_dir: Path,
    ):
        """
        初始化

        Args:
            images: 消息链中的图片组件（带 url 或 file 属性）
            downloader: 图片下载器
            work_dir: 原图保存目录
        """
        self.images = images
        self.downloader = downloader
        self.work_dir = work_dir

    async def acquire(self) -> Optional[SourceImage]:
        """
        获取原图

        Returns:
            原图，消息中没有可读取的图片时返回None

        Raises:
            DownloadError: 下载图片失败
        """
        for img in self.images:
            content = await self._read_content(img)
            if content:
                return await asyncio.to_thread(self._store, content)

        logger.debug("消息中没有可用的图片")
        return None

    async def _read_content(self, img: Any) -> Optional[bytes]:
        # 从URL下载
        url = getattr(img, "url", None)
        if url:
            return await self.downloader.download_image(url)

        # 从本地文件读取
        file = getattr(img, "file", None)
        if file:
            try:
                return await asyncio.to_thread(local_path_from_uri(file).read_bytes)
            except OSError as e:
                logger.error(f"读取本地图片失败: {e}")
        return None

    def _store(self, content: bytes) -> SourceImage:
        format_type, width, height = detect_image(content)
        ext = format_type.extension if format_type != ImageFormat.UNKNOWN else "img"

        self.work_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.work_dir / f"source_{int(time.time())}_{uuid.uuid4().hex[:8]}.{ext}"
        filepath.write_bytes(content)

        logger.info(f"已获取原图: {filepath} ({width}x{height}, {len(content)} 字节)")
        return SourceImage(uri=str(filepath), width=width, height=height)
