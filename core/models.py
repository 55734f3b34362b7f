# -*- coding: utf-8 -*-
"""
压缩流程的数据模型
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.compression.format import ImageEncoding
from core.compression.policy import PolicyKey


@dataclass(frozen=True)
class SourceImage:
    """用户选择的原图，选择新图时整体替换"""

    uri: str
    width: Optional[int] = None  # 未知时为 None
    height: Optional[int] = None


@dataclass(frozen=True)
class DerivedArtifact:
    """压缩结果"""

    uri: str
    width: Optional[int] = None
    height: Optional[int] = None
    byte_size: Optional[int] = None  # 探测前未知
    encoding: Optional[ImageEncoding] = None


@dataclass(frozen=True)
class PermissionCapability:
    """相册写入权限，granted 为 None 表示未知"""

    granted: Optional[bool] = None


class PipelineState(Enum):
    """压缩流程状态"""

    EMPTY = "empty"
    HAS_SOURCE = "has_source"
    TRANSFORMING = "transforming"
    READY = "ready"
    FAILED = "failed"


@dataclass
class PipelineSession:
    """单个用户当前的压缩会话"""

    source: Optional[SourceImage] = None
    policy_key: PolicyKey = PolicyKey.LOSSY
    artifact: Optional[DerivedArtifact] = None
    state: PipelineState = PipelineState.EMPTY
    error: Optional[Exception] = None
    # 单调递增的请求序号，只有与当前序号匹配的结果才会被提交
    sequence: int = 0
