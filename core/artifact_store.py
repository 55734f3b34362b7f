# -*- coding: utf-8 -*-
"""
压缩结果保存模块
"""

import asyncio
import shutil
import time
import uuid
from pathlib import Path
from typing import Optional

from astrbot.api import logger

from core.exceptions import PermissionDeniedError, PersistError
from core.interfaces import GalleryWriter
from core.models import DerivedArtifact, PermissionCapability
from core.uri import local_path_from_uri


class DirectoryGalleryWriter(GalleryWriter):
    """以本地目录作为相册"""

    def __init__(self, gallery_dir: Path):
        """
        初始化相册写入器

        Args:
            gallery_dir: 相册目录
        """
        self.gallery_dir = gallery_dir

    async def write(self, artifact_uri: str) -> Optional[str]:
        """
        复制压缩结果到相册目录

        Args:
            artifact_uri: 压缩结果位置

        Returns:
            保存后的文件路径
        """
        return await asyncio.to_thread(self._write_sync, artifact_uri)

    def _write_sync(self, artifact_uri: str) -> str:
        source_path = local_path_from_uri(artifact_uri)
        try:
            self.gallery_dir.mkdir(parents=True, exist_ok=True)
            filepath = (
                self.gallery_dir
                / f"{int(time.time())}_{uuid.uuid4().hex[:8]}{source_path.suffix}"
            )
            shutil.copy2(source_path, filepath)
            logger.info(f"图片已保存到相册: {filepath}")
            return str(filepath)
        except Exception as e:
            logger.error(f"保存图片失败: {e}")
            raise PersistError(f"保存图片失败: {e}") from e


class ArtifactStore:
    """将压缩结果保存到相册，需要事先获得写入权限"""

    def __init__(self, writer: GalleryWriter, permission: PermissionCapability):
        """
        初始化

        Args:
            writer: 相册写入器
            permission: 启动时申请到的相册权限
        """
        self.writer = writer
        self.permission = permission

    async def persist(self, artifact: DerivedArtifact) -> Optional[str]:
        """
        保存压缩结果

        Args:
            artifact: 压缩结果

        Returns:
            写入器返回的保存位置

        Raises:
            PermissionDeniedError: 没有相册写入权限，不会尝试写入
            PersistError: 写入失败
        """
        if self.permission.granted is not True:
            logger.warning("没有相册写入权限，跳过保存")
            raise PermissionDeniedError("没有相册写入权限")

        try:
            return await self.writer.write(artifact.uri)
        except PersistError:
            raise
        except Exception as e:
            logger.error(f"保存到相册失败: {e}")
            raise PersistError(f"保存到相册失败: {e}") from e
