# -*- coding: utf-8 -*-
"""
压缩流程：选择原图 -> 压缩 -> 暴露结果

会话状态只在事件循环的 await 点之间变化。每次 select_source / apply_policy
都会递增请求序号，异步结果返回时序号不一致即视为过期并丢弃。
被替换或丢弃的原图、压缩结果会交给 release 回调释放。
"""

import dataclasses
from typing import Callable, Optional, Union

from astrbot.api import logger

from core.compression.policy import CompressionPolicy, PolicyKey, resolve
from core.exceptions import NoSourceError, TransformationError
from core.interfaces import SourceAcquirer, Transformer
from core.models import DerivedArtifact, PipelineSession, PipelineState, SourceImage


class ImagePipeline:
    """单个用户的压缩流程"""

    def __init__(
        self,
        transformer: Transformer,
        default_policy: Union[PolicyKey, str] = PolicyKey.LOSSY,
        release: Optional[Callable[[str], None]] = None,
    ):
        """
        初始化压缩流程

        Args:
            transformer: 图片转换器
            default_policy: 默认压缩方式
            release: 原图或压缩结果不再被会话引用时调用，参数为其 uri
        """
        self.transformer = transformer
        self.release = release
        self.session = PipelineSession(policy_key=resolve(default_policy).key)

    @property
    def state(self) -> PipelineState:
        return self.session.state

    @property
    def last_error(self) -> Optional[Exception]:
        return self.session.error

    @property
    def is_busy(self) -> bool:
        return self.session.state is PipelineState.TRANSFORMING

    def get_source(self) -> Optional[SourceImage]:
        return self.session.source

    def get_artifact(self) -> Optional[DerivedArtifact]:
        return self.session.artifact

    def get_selected_policy(self) -> CompressionPolicy:
        """当前选择的压缩方式"""
        return resolve(self.session.policy_key)

    def _release(self, uri: str) -> None:
        if self.release is not None:
            self.release(uri)

    def _next_sequence(self) -> int:
        self.session.sequence += 1
        return self.session.sequence

    def _drop_artifact(self) -> None:
        if self.session.artifact is not None:
            self._release(self.session.artifact.uri)
        self.session.artifact = None
        self.session.error = None

    def _invalidate_artifact(self) -> None:
        """清除旧结果，并让进行中的压缩过期"""
        self._next_sequence()
        self._drop_artifact()

    def _settle_state(self) -> None:
        self.session.state = (
            PipelineState.HAS_SOURCE
            if self.session.source is not None
            else PipelineState.EMPTY
        )

    def select_source(self, source: Optional[SourceImage]) -> None:
        """
        选择原图

        Args:
            source: 新原图，None 表示用户取消选择（保留之前的原图）
        """
        self._invalidate_artifact()
        if source is not None:
            previous = self.session.source
            self.session.source = source
            if previous is not None and previous.uri != source.uri:
                self._release(previous.uri)
            logger.debug(f"已选择原图: {source.uri} ({source.width}x{source.height})")
        self._settle_state()

    async def pick_source(self, acquirer: SourceAcquirer) -> Optional[SourceImage]:
        """
        通过获取器选择原图，先清除旧结果再等待获取

        Args:
            acquirer: 原图获取器

        Returns:
            获取到的原图，取消时返回None
        """
        self._invalidate_artifact()
        self._settle_state()
        source = await acquirer.acquire()
        self.select_source(source)
        return source

    def select_policy(self, key: Union[PolicyKey, str]) -> CompressionPolicy:
        """
        选择压缩方式（不触发压缩）

        Raises:
            UnknownPolicyError: key 无效
        """
        policy = resolve(key)
        self.session.policy_key = policy.key
        return policy

    def record_artifact_size(self, uri: str, byte_size: int) -> Optional[DerivedArtifact]:
        """
        记录探测到的压缩结果大小

        Args:
            uri: 压缩结果位置
            byte_size: 字节数

        Returns:
            更新后的压缩结果；uri 不是当前结果时返回None
        """
        artifact = self.session.artifact
        if artifact is None or artifact.uri != uri:
            return None
        artifact = dataclasses.replace(artifact, byte_size=byte_size)
        self.session.artifact = artifact
        return artifact

    async def apply_policy(
        self, key: Union[PolicyKey, str, None] = None
    ) -> Optional[DerivedArtifact]:
        """
        按压缩方式压缩当前原图

        Args:
            key: 压缩方式，None 表示使用当前选择的压缩方式

        Returns:
            压缩结果；本次请求被更新的请求取代时返回None

        Raises:
            UnknownPolicyError: key 无效
            NoSourceError: 尚未选择原图
            TransformationError: 压缩失败，原图保留，可重试
        """
        policy = resolve(key) if key is not None else self.get_selected_policy()

        source = self.session.source
        if source is None:
            raise NoSourceError("请先选择一张图片")

        self.session.policy_key = policy.key
        sequence = self._next_sequence()
        self._drop_artifact()
        self.session.state = PipelineState.TRANSFORMING
        logger.debug(f"开始压缩 #{sequence}: {policy.key.value}, 原图: {source.uri}")

        try:
            artifact = await self.transformer.transform(
                source.uri,
                policy.resize_spec(source.width),
                policy.quality,
                policy.encoding,
            )
        except Exception as e:
            if sequence != self.session.sequence:
                logger.debug(f"压缩请求 #{sequence} 已过期，忽略其失败: {e}")
                return None
            error = (
                e
                if isinstance(e, TransformationError)
                else TransformationError(f"图片压缩失败: {e}")
            )
            self.session.error = error
            self.session.state = PipelineState.FAILED
            logger.error(f"压缩请求 #{sequence} 失败: {e}")
            if error is e:
                raise
            raise error from e

        if sequence != self.session.sequence:
            logger.debug(f"压缩请求 #{sequence} 已过期，丢弃结果: {artifact.uri}")
            self._release(artifact.uri)
            return None

        self.session.artifact = artifact
        self.session.state = PipelineState.READY
        logger.info(f"压缩完成 ({policy.key.value}): {artifact.uri}")
        return artifact
