"""流水线定义模型

内存中的流水线对象图：流水线 → 阶段 → 动作 → 产物。
代码仓来源只负责向其中追加 "Source" 阶段；阶段名唯一性由本模型自行校验，
错误原样向调用方传播。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Union

from delivkit.core.exceptions import PipelineDefinitionError
from delivkit.core.models import ManagedRepositoryHandle, SecretValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    """阶段之间传递的产物"""

    name: str


@dataclass(frozen=True)
class ManagedSourceAction:
    """从内部托管代码仓拉取源码"""

    action_name: str
    repository: ManagedRepositoryHandle
    branch: str
    output: Artifact

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": "managed",
            "action_name": self.action_name,
            "repository": self.repository.repository_name,
            "branch": self.branch,
            "output": self.output.name,
        }


@dataclass(frozen=True)
class HostedGitSourceAction:
    """从托管 Git 仓库拉取源码"""

    action_name: str
    owner: str
    repo: str
    branch: str
    oauth_token: SecretValue
    output: Artifact

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": "hosted_git",
            "action_name": self.action_name,
            "owner": self.owner,
            "repo": self.repo,
            "branch": self.branch,
            "oauth_token": "***",
            "output": self.output.name,
        }


SourceAction = Union[ManagedSourceAction, HostedGitSourceAction]


@dataclass
class Stage:
    """流水线阶段"""

    name: str
    actions: list[SourceAction] = field(default_factory=list)

    def add_action(self, action: SourceAction) -> None:
        names = {a.action_name for a in self.actions}
        if action.action_name in names:
            raise PipelineDefinitionError(
                f"阶段 {self.name} 中已存在动作: {action.action_name}"
            )
        self.actions.append(action)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "actions": [a.to_dict() for a in self.actions],
        }


@dataclass
class PipelineDefinition:
    """流水线定义（仅在合成阶段被修改）"""

    name: str
    stages: list[Stage] = field(default_factory=list)

    @property
    def stage_names(self) -> list[str]:
        return [s.name for s in self.stages]

    def add_stage(self, stage_name: str) -> Stage:
        """追加阶段，阶段名重复时拒绝"""
        if not stage_name:
            raise PipelineDefinitionError("阶段名不能为空")
        if stage_name in self.stage_names:
            raise PipelineDefinitionError(
                f"流水线 {self.name} 中已存在阶段: {stage_name}"
            )
        stage = Stage(name=stage_name)
        self.stages.append(stage)
        logger.debug("流水线 %s 追加阶段: %s", self.name, stage_name)
        return stage

    def stage(self, name: str) -> Stage | None:
        for s in self.stages:
            if s.name == name:
                return s
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "stages": [s.to_dict() for s in self.stages],
        }
