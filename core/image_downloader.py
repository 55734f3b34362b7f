# -*- coding: utf-8 -*-
"""
原图下载模块
"""

import asyncio
from typing import Optional

import aiohttp

from astrbot.api import logger

from core.exceptions import DownloadError


class ImageDownloader:
    """下载消息中的原图，复用同一个 HTTP 会话"""

    def __init__(self, timeout: int = 30, max_bytes: int = 0):
        """
        Args:
            timeout: 下载超时时间（秒）
            max_bytes: 原图大小上限，0 表示不限制
        """
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self):
        """关闭 HTTP 会话"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def download_image(self, url: str) -> Optional[bytes]:
        """
        下载原图

        Args:
            url: 图片URL

        Returns:
            图片内容，服务器未返回200时返回None

        Raises:
            DownloadError: 网络错误或超过大小上限
        """
        session = await self._get_session()
        try:
            async with session.get(url) as resp:
                if resp.status != 200:
                    logger.warning(f"原图下载失败，状态码: {resp.status}, URL: {url}")
                    return None

                if self.max_bytes and (resp.content_length or 0) > self.max_bytes:
                    raise DownloadError(f"原图超过大小上限: {resp.content_length} 字节")

                chunks = []
                received = 0
                async for chunk in resp.content.iter_chunked(64 * 1024):
                    received += len(chunk)
                    if self.max_bytes and received > self.max_bytes:
                        raise DownloadError(f"原图超过大小上限: {self.max_bytes} 字节")
                    chunks.append(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"原图下载失败 {url}: {e}")
            raise DownloadError(f"下载图片失败: {e}") from e

        logger.debug(f"原图下载完成: {url}, {received} 字节")
        return b"".join(chunks)

    async def fetch_size(self, url: str) -> int:
        """
        获取远程资源的字节大小，优先使用 HEAD 返回的 Content-Length

        Args:
            url: 资源URL

        Returns:
            字节数

        Raises:
            DownloadError: 网络错误或资源不可用
        """
        session = await self._get_session()
        try:
            async with session.head(url, allow_redirects=True) as resp:
                if resp.status == 200 and resp.content_length is not None:
                    return resp.content_length
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"HEAD 请求失败，改为下载计算大小 {url}: {e}")

        content = await self.download_image(url)
        if content is None:
            raise DownloadError(f"无法获取资源大小: {url}")
        return len(content)
