# -*- coding: utf-8 -*-
"""
配置管理模块
"""

from pathlib import Path
from typing import Any, Dict, Optional

from astrbot.api import logger

from core.compression.policy import PolicyKey


class PluginConfig:
    """插件配置包装类，提供统一的配置访问接口"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        初始化配置

        Args:
            config: AstrBot传入的配置字典
        """
        self.config = config if config is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        获取配置值

        Args:
            key: 配置键
            default: 默认值

        Returns:
            配置值
        """
        return self.config.get(key, default)

    # 压缩配置
    @property
    def default_policy(self) -> PolicyKey:
        """新会话默认使用的压缩方式"""
        value = self.get("default_policy", PolicyKey.LOSSY.value)
        try:
            return PolicyKey(str(value).strip().lower())
        except ValueError:
            logger.warning(f"默认压缩方式配置无效: {value}，使用 lossy")
            return PolicyKey.LOSSY

    @property
    def send_result_image(self) -> bool:
        """压缩完成后是否发送压缩后的图片"""
        return self.get("send_result_image", True)

    # 相册配置
    @property
    def allow_gallery_save(self) -> bool:
        """是否允许保存到相册"""
        return self.get("allow_gallery_save", True)

    @property
    def gallery_dir_name(self) -> str:
        """相册目录名"""
        return self.get("gallery_dir_name", "gallery")

    # 下载配置
    @property
    def download_timeout(self) -> int:
        """下载原图的超时时间（秒）"""
        return self.get("download_timeout", 30)

    @property
    def max_source_size(self) -> int:
        """原图最大大小（字节），0表示不限制"""
        return self.get("max_source_size_mb", 20) * 1024 * 1024

    def set_data_dir(self, data_dir: Path) -> None:
        """
        设置数据目录

        Args:
            data_dir: 数据目录路径
        """
        self._data_dir = data_dir
        logger.info(f"图片压缩插件数据目录: {data_dir}")

    def get_data_dir(self) -> Path:
        """
        获取数据目录

        Returns:
            数据目录路径
        """
        if not hasattr(self, "_data_dir"):
            raise RuntimeError("数据目录未初始化，请先调用 set_data_dir()")
        return self._data_dir
