"""
图片压缩插件核心模块
"""

from core.config import PluginConfig
from core.exceptions import (
    ImageCompressorError,
    UnknownPolicyError,
    NoSourceError,
    TransformationError,
    PermissionDeniedError,
    PersistError,
    DownloadError,
)

__all__ = [
    "PluginConfig",
    "ImageCompressorError",
    "UnknownPolicyError",
    "NoSourceError",
    "TransformationError",
    "PermissionDeniedError",
    "PersistError",
    "DownloadError",
]
