# -*- coding: utf-8 -*-
"""
压缩方式模块 - 三种静态压缩方式及 Pillow 转换器
"""

from core.compression.format import ImageEncoding, ImageFormat, detect_image
from core.compression.policy import (
    DEFAULT_RESIZE_WIDTH,
    CompressionPolicy,
    PolicyKey,
    ResizeSpec,
    list_policies,
    resolve,
)
from core.compression.transformer import PillowTransformer

__all__ = [
    "ImageEncoding",
    "ImageFormat",
    "detect_image",
    "DEFAULT_RESIZE_WIDTH",
    "CompressionPolicy",
    "PolicyKey",
    "ResizeSpec",
    "list_policies",
    "resolve",
    "PillowTransformer",
]
