# -*- coding: utf-8 -*-
"""
工作目录清理模块

只删除位于工作目录内的文件，相册和用户自己的文件不受影响。
"""

from pathlib import Path

from astrbot.api import logger

from core.uri import is_remote_uri, local_path_from_uri


class WorkspaceCleaner:
    """清理工作目录中不再使用的原图和压缩结果"""

    def __init__(self, work_dir: Path):
        """
        Args:
            work_dir: 工作目录
        """
        self.work_dir = work_dir

    def _owns(self, path: Path) -> bool:
        try:
            return path.resolve().parent == self.work_dir.resolve()
        except OSError:
            return False

    def release(self, uri: str) -> bool:
        """
        删除工作目录中的文件

        Args:
            uri: 文件位置

        Returns:
            是否删除了文件
        """
        if is_remote_uri(uri):
            return False
        path = local_path_from_uri(uri)
        if not self._owns(path):
            logger.debug(f"不在工作目录内，跳过清理: {uri}")
            return False
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"清理工作文件失败: {path}, {e}")
            return False
        logger.debug(f"已清理工作文件: {path}")
        return True

    def clear(self) -> int:
        """
        清空工作目录

        Returns:
            删除的文件数
        """
        if not self.work_dir.exists():
            return 0
        removed = 0
        for path in self.work_dir.iterdir():
            if path.is_file() and self.release(str(path)):
                removed += 1
        if removed:
            logger.info(f"已清空工作目录 {self.work_dir}: {removed} 个文件")
        return removed
