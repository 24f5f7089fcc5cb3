"""来源服务 — 按名称取出已注册来源，组装流水线源阶段与构建源描述

调用方只持有 RepositorySource 协议，不关心具体来源类型。
输出均为可 JSON 序列化的字典，供 CLI 与外部编排引擎消费。
"""

from __future__ import annotations

import logging
from typing import Any

from delivkit.core.exceptions import ValidationError
from delivkit.core.pipeline import PipelineDefinition
from delivkit.core.protocols import RepositorySource
from delivkit.services.repo.registry import RepoSourceRegistry
from delivkit.services.repo.sources import is_writable

logger = logging.getLogger(__name__)


class SourceService:
    """代码仓来源到流水线配置的转换"""

    def __init__(self, registry_file: str = "") -> None:
        self.registry = RepoSourceRegistry(registry_file=registry_file)

    def resolve(self, name: str) -> RepositorySource:
        """取出已注册来源，未注册时报错"""
        source = self.registry.get(name)
        if source is None:
            raise ValidationError(f"代码仓来源未注册: {name}")
        return source

    def describe(self, name: str) -> str:
        return self.resolve(name).describe()

    def source_stage(
        self, name: str, branch: str = "", pipeline_name: str = "",
    ) -> dict[str, Any]:
        """在新的流水线定义中追加源阶段，返回流水线字典"""
        from delivkit.core.config import get_config
        cfg = get_config()
        source = self.resolve(name)
        pipeline = PipelineDefinition(name=pipeline_name or cfg.pipeline_name)
        artifact = source.create_source_stage(pipeline, branch or cfg.default_branch)
        result = pipeline.to_dict()
        result["output_artifact"] = artifact.name
        return result

    def build_source(
        self, name: str, *, webhook: bool = False, branch: str | None = None,
    ) -> dict[str, Any]:
        """生成构建源描述字典"""
        source = self.resolve(name)
        descriptor = source.create_build_source(None, webhook, branch or None)
        logger.info(
            "构建源已生成: %s (webhook=%s, branch=%s)", source.describe(), webhook, branch or "*",
        )
        return descriptor.to_dict()

    def capabilities(self, name: str) -> dict[str, Any]:
        """来源能力概览"""
        source = self.resolve(name)
        return {
            "name": name,
            "describe": source.describe(),
            "allows_badge": source.allows_badge,
            "writable": is_writable(source),
            "repository_url_http": source.repository_url_http,
            "repository_url_ssh": source.repository_url_ssh,
        }
