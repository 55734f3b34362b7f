# -*- coding: utf-8 -*-
"""
资源位置（URI）工具
"""

from pathlib import Path
from urllib.parse import unquote, urlparse


def is_remote_uri(uri: str) -> bool:
    """是否为 http(s) 地址"""
    return uri.startswith(("http://", "https://"))


def local_path_from_uri(uri: str) -> Path:
    """
    将本地路径或 file:// URI 转换为 Path

    Args:
        uri: 本地路径或 file:// URI

    Returns:
        本地文件路径
    """
    if uri.startswith("file://"):
        return Path(unquote(urlparse(uri).path))
    return Path(uri)
