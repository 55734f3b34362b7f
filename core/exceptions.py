# -*- coding: utf-8 -*-
"""
图片压缩插件异常定义
"""


class ImageCompressorError(Exception):
    """图片压缩插件基础异常类"""
    pass


class UnknownPolicyError(ImageCompressorError):
    """未知的压缩方式"""

    def __init__(self, key):
        super().__init__(f"未知的压缩方式: {key}")
        self.key = key


class NoSourceError(ImageCompressorError):
    """尚未选择原图"""
    pass


class TransformationError(ImageCompressorError):
    """图片压缩（转换）异常，可重试或换用其他压缩方式"""
    pass


class PermissionDeniedError(ImageCompressorError):
    """没有相册写入权限"""
    pass


class PersistError(ImageCompressorError):
    """保存到相册失败"""
    pass


class DownloadError(ImageCompressorError):
    """图片下载异常"""
    pass
