# -*- coding: utf-8 -*-
"""
相册权限模块
"""

from astrbot.api import logger

from core.config import PluginConfig
from core.interfaces import PermissionRequester
from core.models import PermissionCapability


class ConfigPermissionRequester(PermissionRequester):
    """按插件配置决定是否允许写入相册"""

    def __init__(self, config: PluginConfig):
        self.config = config

    async def request_gallery_write_permission(self) -> PermissionCapability:
        granted = bool(self.config.allow_gallery_save)
        logger.info(f"相册写入权限: {'已授权' if granted else '未授权'}")
        return PermissionCapability(granted=granted)
