# -*- coding: utf-8 -*-
"""AstrBot 图片压缩插件 - 选择图片、按预设方式压缩、预览并保存到相册"""

import os
from pathlib import Path
from typing import Dict

from astrbot.api import AstrBotConfig, logger
from astrbot.api.event import filter, AstrMessageEvent
from astrbot.api.message_components import Image as CompImage
from astrbot.core.utils.astrbot_path import get_astrbot_data_path
from astrbot.api.star import Context, Star, register

from core.artifact_store import ArtifactStore, DirectoryGalleryWriter
from core.compression import PillowTransformer, list_policies
from core.config import PluginConfig
from core.exceptions import (
    DownloadError,
    NoSourceError,
    PermissionDeniedError,
    PersistError,
    TransformationError,
    UnknownPolicyError,
)
from core.image_downloader import ImageDownloader
from core.models import PermissionCapability
from core.path_manager import PathManager
from core.permission import ConfigPermissionRequester
from core.pipeline import ImagePipeline
from core.size_probe import SizeProbe, UriByteSizeReader, format_size
from core.source_acquirer import MessageImageAcquirer
from core.workspace import WorkspaceCleaner


@register(
    "image_compressor",
    "Cline",
    "选择一张图片，按有损、无损或最高效三种方式压缩，预览结果并保存到相册",
    "1.0.0",
    "https://github.com/your-repo/astrbot_plugin_image_compressor",
)
class ImageCompressorPlugin(Star):
    """图片压缩插件"""

    def __init__(self, context: Context, config: AstrBotConfig = None):
        super().__init__(context)
        self.config = PluginConfig(config)

        # 初始化数据目录
        astrbot_data_path = get_astrbot_data_path()
        plugin_name = "image_compressor"  # 插件名称
        data_dir = Path(os.path.join(astrbot_data_path, "plugin_data", plugin_name))
        data_dir.mkdir(parents=True, exist_ok=True)
        self.config.set_data_dir(data_dir)

        self.path_manager = PathManager(self.config)
        self.downloader = ImageDownloader(
            timeout=self.config.download_timeout,
            max_bytes=self.config.max_source_size,
        )
        self.size_reader = UriByteSizeReader(self.downloader)
        self.permission = PermissionCapability()
        self._pipelines: Dict[str, ImagePipeline] = {}
        self._size_probes: Dict[str, SizeProbe] = {}
        self._cleaners: Dict[str, WorkspaceCleaner] = {}

        logger.info(f"图片压缩插件已加载，数据目录: {data_dir}")

    async def initialize(self):
        """启动时申请一次相册写入权限"""
        requester = ConfigPermissionRequester(self.config)
        self.permission = await requester.request_gallery_write_permission()

    def _user_dir(self, event: AstrMessageEvent) -> Path:
        platform = event.get_platform_name()
        group_id = event.message_obj.group_id or "private"
        user_id = event.get_sender_id()
        return self.path_manager.get_user_dir(platform, group_id, user_id)

    def _get_pipeline(self, event: AstrMessageEvent) -> ImagePipeline:
        """获取（或创建）当前用户的压缩流程"""
        user_dir = self._user_dir(event)
        key = str(user_dir)
        pipeline = self._pipelines.get(key)
        if pipeline is None:
            work_dir = self.path_manager.get_work_dir(user_dir)
            cleaner = WorkspaceCleaner(work_dir)
            # 新会话不会引用之前遗留的工作文件
            cleaner.clear()
            size_probe = SizeProbe(self.size_reader)

            def release(uri: str) -> None:
                cleaner.release(uri)
                size_probe.forget(uri)

            pipeline = ImagePipeline(
                PillowTransformer(work_dir), self.config.default_policy, release
            )
            self._pipelines[key] = pipeline
            self._size_probes[key] = size_probe
            self._cleaners[key] = cleaner
        return pipeline

    def _get_size_probe(self, event: AstrMessageEvent) -> SizeProbe:
        self._get_pipeline(event)
        return self._size_probes[str(self._user_dir(event))]

    @filter.command("选择图片")
    async def select_image(self, event: AstrMessageEvent):
        """发送该指令并附带一张图片，作为待压缩的原图"""
        pipeline = self._get_pipeline(event)
        # 新的原图会让旧压缩结果的大小展示失效
        self._get_size_probe(event).cancel()
        images = [
            msg for msg in event.message_obj.message if isinstance(msg, CompImage)
        ]
        acquirer = MessageImageAcquirer(
            images,
            self.downloader,
            self.path_manager.get_work_dir(self._user_dir(event)),
        )

        try:
            source = await pipeline.pick_source(acquirer)
        except DownloadError as e:
            yield event.plain_result(f"获取图片失败: {e}")
            return

        if source is None:
            yield event.plain_result("没有找到图片，请在指令后附带一张图片")
            return

        size = await self._get_size_probe(event).probe(source.uri)
        dims = f"{source.width}x{source.height}" if source.width else "未知尺寸"
        policy = pipeline.get_selected_policy()
        yield event.plain_result(
            f"已选择图片: {dims}, 大小: {format_size(size)}\n"
            f"当前压缩方式: {policy.label}\n"
            f"发送 /压缩图片 开始压缩"
        )

    @filter.command("压缩方式")
    async def list_methods(self, event: AstrMessageEvent):
        """查看可用的压缩方式"""
        current = self._get_pipeline(event).get_selected_policy()
        lines = ["可用的压缩方式:"]
        for policy in list_policies():
            mark = " (当前)" if policy.key is current.key else ""
            lines.append(f"- {policy.key.value}: {policy.label}{mark}\n  {policy.description}")
        yield event.plain_result("\n".join(lines))

    @filter.command("设置压缩")
    async def set_method(self, event: AstrMessageEvent, key: str = ""):
        """设置压缩方式: lossy / lossless / efficient"""
        try:
            policy = self._get_pipeline(event).select_policy(key)
        except UnknownPolicyError:
            yield event.plain_result("未知的压缩方式，可选: lossy, lossless, efficient")
            return
        yield event.plain_result(f"压缩方式已设置为: {policy.label}\n{policy.description}")

    @filter.command("压缩图片")
    async def compress_image(self, event: AstrMessageEvent, key: str = ""):
        """压缩当前选择的图片，可附带压缩方式"""
        pipeline = self._get_pipeline(event)
        if pipeline.is_busy:
            yield event.plain_result("上一次压缩尚未完成，将以本次请求为准")
        try:
            artifact = await pipeline.apply_policy(key or None)
        except UnknownPolicyError:
            yield event.plain_result("未知的压缩方式，可选: lossy, lossless, efficient")
            return
        except NoSourceError:
            yield event.plain_result("请先发送 /选择图片 并附带一张图片")
            return
        except TransformationError:
            yield event.plain_result("压缩图片失败，可以重试或换一种压缩方式")
            return

        if artifact is None:
            # 已被更新的请求取代
            return

        source = pipeline.get_source()
        size_probe = self._get_size_probe(event)
        original_size = await size_probe.probe(source.uri)
        compressed_size = await size_probe.refresh(artifact.uri)
        if compressed_size is None:
            return
        pipeline.record_artifact_size(artifact.uri, compressed_size)

        yield event.plain_result(
            f"压缩完成 ({pipeline.get_selected_policy().label})\n"
            f"原图: {format_size(original_size)}\n"
            f"压缩后: {format_size(compressed_size)}\n"
            f"发送 /保存图片 保存到相册"
        )
        if self.config.send_result_image:
            yield event.image_result(artifact.uri)

    @filter.command("保存图片")
    async def save_image(self, event: AstrMessageEvent):
        """将压缩后的图片保存到相册"""
        pipeline = self._get_pipeline(event)
        if pipeline.is_busy:
            yield event.plain_result("压缩中，请稍后再保存")
            return
        artifact = pipeline.get_artifact()
        if artifact is None:
            yield event.plain_result("还没有压缩结果，请先发送 /压缩图片")
            return

        gallery_dir = self.path_manager.get_gallery_dir(self._user_dir(event))
        store = ArtifactStore(DirectoryGalleryWriter(gallery_dir), self.permission)
        try:
            await store.persist(artifact)
        except PermissionDeniedError:
            yield event.plain_result("没有相册写入权限，无法保存")
            return
        except PersistError:
            yield event.plain_result("保存图片失败，请稍后重试")
            return
        yield event.plain_result("图片已保存到相册!")

    async def terminate(self):
        """插件卸载时调用"""
        for probe in self._size_probes.values():
            probe.cancel()
        for cleaner in self._cleaners.values():
            cleaner.clear()
        await self.downloader.close()
        logger.info("图片压缩插件已卸载")
