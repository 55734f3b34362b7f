# -*- coding: utf-8 -*-
"""
路径管理模块
"""

from pathlib import Path

from astrbot.api import logger

from core.config import PluginConfig


class PathManager:
    """路径管理器"""

    def __init__(self, config: PluginConfig):
        """
        初始化路径管理器

        Args:
            config: 插件配置
        """
        self.config = config
        self._data_dir = config.get_data_dir()

    def get_user_dir(self, platform: str, group_id: str, user_id: str) -> Path:
        """
        获取用户数据目录

        Args:
            platform: 平台名称
            group_id: 群组ID
            user_id: 用户ID

        Returns:
            用户数据目录路径
        """
        user_dir = self._data_dir / platform / group_id / user_id
        user_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"用户目录: {user_dir}")
        return user_dir

    def get_work_dir(self, user_dir: Path) -> Path:
        """获取存放原图和压缩结果的临时目录"""
        work_dir = user_dir / "work"
        work_dir.mkdir(parents=True, exist_ok=True)
        return work_dir

    def get_gallery_dir(self, user_dir: Path) -> Path:
        """获取用户相册目录"""
        gallery_dir = user_dir / self.config.gallery_dir_name
        gallery_dir.mkdir(parents=True, exist_ok=True)
        return gallery_dir
