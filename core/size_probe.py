# -*- coding: utf-8 -*-
"""
文件大小探测模块

大小只用于展示，读取失败时返回 0 而不是抛出异常。
"""

import asyncio
import os
from typing import Dict, Optional

from astrbot.api import logger

from core.image_downloader import ImageDownloader
from core.interfaces import ByteSizeReader
from core.uri import is_remote_uri, local_path_from_uri


def format_size(num_bytes: int) -> str:
    """按 KB 显示，保留两位小数"""
    return f"{num_bytes / 1024:.2f} KB"


class UriByteSizeReader(ByteSizeReader):
    """读取本地文件或 http(s) 资源的字节大小"""

    def __init__(self, downloader: ImageDownloader):
        """
        Args:
            downloader: 远程资源复用下载器的 HTTP 会话
        """
        self.downloader = downloader

    async def read_size(self, uri: str) -> int:
        if is_remote_uri(uri):
            return await self.downloader.fetch_size(uri)

        path = local_path_from_uri(uri)
        stat = await asyncio.to_thread(os.stat, path)
        return stat.st_size


class SizeProbe:
    """异步文件大小探测，支持展示上下文销毁后忽略过期结果"""

    def __init__(self, reader: ByteSizeReader, max_entries: int = 64):
        """
        初始化

        Args:
            reader: 字节大小读取器
            max_entries: 缓存的最大条目数，超出时淘汰最早的条目
        """
        self.reader = reader
        self.max_entries = max_entries
        self._cache: Dict[str, int] = {}
        self._generation = 0
        self.handle: Optional[str] = None
        self.size: Optional[int] = None

    async def probe(self, handle: str) -> int:
        """
        读取大小

        Args:
            handle: 资源位置

        Returns:
            字节数，读取失败时返回0
        """
        if handle in self._cache:
            return self._cache[handle]
        try:
            size = await self.reader.read_size(handle)
        except Exception as e:
            logger.warning(f"读取文件大小失败，按 0 处理: {handle}, {e}")
            return 0
        self._cache[handle] = size
        while len(self._cache) > self.max_entries:
            self._cache.pop(next(iter(self._cache)))
        return size

    def forget(self, handle: str) -> None:
        """资源被删除后移除其缓存"""
        self._cache.pop(handle, None)

    async def refresh(self, handle: str) -> Optional[int]:
        """
        为展示上下文探测新资源的大小

        Args:
            handle: 资源位置

        Returns:
            字节数；探测期间有更新的请求或已调用 cancel() 时返回None
        """
        self._generation += 1
        generation = self._generation
        self.handle = handle
        self.size = None

        size = await self.probe(handle)
        if generation != self._generation:
            logger.debug(f"大小探测结果已过期，忽略: {handle}")
            return None

        self.size = size
        return size

    def cancel(self) -> None:
        """展示上下文销毁，忽略进行中的探测"""
        self._generation += 1
