# -*- coding: utf-8 -*-
"""
压缩方式（策略）定义

三种压缩方式是静态枚举的，只能通过 key 查找，不会动态构造。
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from core.compression.format import ImageEncoding
from core.exceptions import UnknownPolicyError

# 原图宽度未知时 efficient 使用的固定宽度
DEFAULT_RESIZE_WIDTH = 100


class PolicyKey(str, Enum):
    """压缩方式的 key"""

    LOSSY = "lossy"
    LOSSLESS = "lossless"
    EFFICIENT = "efficient"


@dataclass(frozen=True)
class ResizeSpec:
    """缩放参数，height 为 None 时按原图比例计算"""

    width: int
    height: Optional[int] = None


@dataclass(frozen=True)
class CompressionPolicy:
    """压缩方式"""

    key: PolicyKey
    label: str
    description: str
    resize_factor: Optional[float]  # (0, 1]，None 表示不缩放
    quality: float  # [0, 1]
    encoding: ImageEncoding

    def resize_spec(self, source_width: Optional[int]) -> Optional[ResizeSpec]:
        """
        计算缩放参数

        Args:
            source_width: 原图宽度，未知时为 None

        Returns:
            缩放参数，不需要缩放时返回 None
        """
        if self.resize_factor is None:
            return None
        if not source_width:
            return ResizeSpec(width=DEFAULT_RESIZE_WIDTH)
        return ResizeSpec(width=math.floor(source_width * self.resize_factor))


_POLICIES = {
    PolicyKey.LOSSY: CompressionPolicy(
        key=PolicyKey.LOSSY,
        label="Lossy (JPEG, low quality)",
        description=(
            "Reduces file size by lowering image quality. Best for photos "
            "where small size is more important than perfect quality."
        ),
        resize_factor=None,
        quality=0.2,
        encoding=ImageEncoding.JPEG,
    ),
    PolicyKey.LOSSLESS: CompressionPolicy(
        key=PolicyKey.LOSSLESS,
        label="Lossless (PNG)",
        description=(
            "Compresses without losing any image data. Best for graphics "
            "or images where quality must be preserved."
        ),
        resize_factor=None,
        # PNG 本身无损，quality 仅为保持接口一致
        quality=1.0,
        encoding=ImageEncoding.PNG,
    ),
    PolicyKey.EFFICIENT: CompressionPolicy(
        key=PolicyKey.EFFICIENT,
        label="Most Efficient",
        description=(
            "Resizes and applies lossy compression for the smallest file "
            "size with reasonable quality."
        ),
        resize_factor=0.5,
        quality=0.2,
        encoding=ImageEncoding.JPEG,
    ),
}


def resolve(key: Union[PolicyKey, str]) -> CompressionPolicy:
    """
    根据 key 查找压缩方式

    Args:
        key: PolicyKey 或其字符串值（忽略大小写和首尾空白）

    Returns:
        对应的压缩方式

    Raises:
        UnknownPolicyError: key 不在三种压缩方式之内
    """
    if isinstance(key, PolicyKey):
        return _POLICIES[key]
    if isinstance(key, str):
        try:
            return _POLICIES[PolicyKey(key.strip().lower())]
        except ValueError:
            pass
    raise UnknownPolicyError(key)


def list_policies() -> list[CompressionPolicy]:
    """按显示顺序返回全部压缩方式"""
    return [_POLICIES[key] for key in PolicyKey]
