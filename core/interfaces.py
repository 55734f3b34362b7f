# -*- coding: utf-8 -*-
"""
压缩流程依赖的外部能力接口
"""

from abc import ABC, abstractmethod
from typing import Optional

from core.compression.format import ImageEncoding
from core.compression.policy import ResizeSpec
from core.models import DerivedArtifact, PermissionCapability, SourceImage


class SourceAcquirer(ABC):
    """原图获取"""

    @abstractmethod
    async def acquire(self) -> Optional[SourceImage]:
        """
        获取用户选择的图片

        Returns:
            原图，用户取消或没有图片时返回None
        """
        pass


class PermissionRequester(ABC):
    """相册权限申请"""

    @abstractmethod
    async def request_gallery_write_permission(self) -> PermissionCapability:
        pass


class Transformer(ABC):
    """图片转换（缩放 + 重新编码）"""

    @abstractmethod
    async def transform(
        self,
        uri: str,
        resize: Optional[ResizeSpec],
        quality: float,
        encoding: ImageEncoding,
    ) -> DerivedArtifact:
        """
        执行转换

        Args:
            uri: 原图位置
            resize: 缩放参数，None表示不缩放
            quality: 压缩质量 (0-1)
            encoding: 输出编码

        Returns:
            压缩结果

        Raises:
            TransformationError: 转换失败
        """
        pass


class GalleryWriter(ABC):
    """相册写入"""

    @abstractmethod
    async def write(self, artifact_uri: str) -> Optional[str]:
        """
        将压缩结果写入相册

        Raises:
            PersistError: 写入失败
        """
        pass


class ByteSizeReader(ABC):
    """字节大小读取"""

    @abstractmethod
    async def read_size(self, uri: str) -> int:
        pass
