"""领域协议定义

流水线组装代码只依赖这里的接口契约，不关心代码仓来源的具体实现。
使用 typing.Protocol 而非 ABC，使来源实现无需继承即可满足协议。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from delivkit.core.models import BuildSourceDescriptor
    from delivkit.core.pipeline import Artifact, PipelineDefinition


# =========================================================================
# 代码仓来源协议
# =========================================================================

class RepositorySource(Protocol):
    """代码仓来源协议

    每种后端（内部托管 / 托管 Git / 可写托管 Git）都提供：
    流水线 "Source" 阶段与构建任务的构建源描述。
    """

    @property
    def repository_url_http(self) -> str:
        """HTTP 克隆地址（由标识字段推导）"""
        ...

    @property
    def repository_url_ssh(self) -> str:
        """SSH 克隆地址（由标识字段推导）"""
        ...

    @property
    def allows_badge(self) -> bool:
        """后端是否支持构建状态徽章"""
        ...

    def create_source_stage(
        self, pipeline: PipelineDefinition, branch: str,
    ) -> Artifact:
        """向流水线追加 "Source" 阶段，返回名为 "Source" 的产物"""
        ...

    def create_build_source(
        self, context: Any, webhook: bool, branch: str | None = None,
    ) -> BuildSourceDescriptor:
        """生成构建任务的构建源描述"""
        ...

    def describe(self) -> str:
        """简短可读标识，仅用于日志与标签"""
        ...
