"""核心数据模型

代码仓来源、凭据引用、webhook 过滤组与构建源描述的值对象集中定义于此。
所有模型在流水线定义阶段构建一次，之后不可变。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Union

from delivkit.core.exceptions import ValidationError

# =========================================================================
# 凭据引用
# =========================================================================


@dataclass(frozen=True, repr=False)
class SecretValue:
    """不透明的访问令牌句柄

    只保存外部密钥存储中的引用，本模块从不读取或输出其内容。
    """

    reference: str

    def __repr__(self) -> str:
        return "SecretValue(***)"

    __str__ = __repr__


@dataclass(frozen=True)
class ExternalSecret:
    """外部托管的密钥（部署 SSH key）引用，原样透传"""

    secret_arn: str
    region: str = ""


# =========================================================================
# 代码仓标识
# =========================================================================


@dataclass(frozen=True)
class ManagedRepositoryHandle:
    """内部托管代码仓句柄 — 名称与克隆地址均由外部提供"""

    repository_name: str
    clone_url_http: str = ""
    clone_url_ssh: str = ""


# =========================================================================
# webhook 过滤组
# =========================================================================


class EventAction(str, Enum):
    """触发构建的仓库事件"""
    PUSH = "PUSH"
    PULL_REQUEST_CREATED = "PULL_REQUEST_CREATED"
    PULL_REQUEST_UPDATED = "PULL_REQUEST_UPDATED"


class BranchConstraint(str, Enum):
    """过滤组的分支约束"""
    NONE = "none"
    BRANCH = "branch"            # push 的目标分支
    BASE_BRANCH = "base_branch"  # PR 的 base 分支


@dataclass(frozen=True)
class FilterGroup:
    """webhook 过滤组：事件集合 + 至多一个分支约束

    用法:
        FilterGroup.in_event_of(EventAction.PUSH).and_branch_is("main")
    """

    event_actions: frozenset[EventAction]
    branch_constraint: BranchConstraint = BranchConstraint.NONE
    branch: str = ""

    @classmethod
    def in_event_of(cls, *actions: EventAction) -> FilterGroup:
        if not actions:
            raise ValidationError("过滤组至少需要一个事件类型")
        return cls(event_actions=frozenset(actions))

    def and_branch_is(self, branch: str) -> FilterGroup:
        """仅当 push 的目标分支等于 branch 时触发"""
        return self._constrain(BranchConstraint.BRANCH, branch)

    def and_base_branch_is(self, branch: str) -> FilterGroup:
        """仅当 PR 的 base 分支等于 branch 时触发"""
        if EventAction.PUSH in self.event_actions:
            raise ValidationError("PUSH 事件没有 base 分支，不能使用 base 分支约束")
        return self._constrain(BranchConstraint.BASE_BRANCH, branch)

    def _constrain(self, constraint: BranchConstraint, branch: str) -> FilterGroup:
        if not branch:
            raise ValidationError("分支名不能为空")
        if self.branch_constraint is not BranchConstraint.NONE:
            raise ValidationError(
                f"过滤组已有分支约束: {self.branch_constraint.value}={self.branch}"
            )
        return replace(self, branch_constraint=constraint, branch=branch)

    @property
    def ordered_actions(self) -> list[EventAction]:
        """按枚举声明顺序排列的事件"""
        return [a for a in EventAction if a in self.event_actions]

    @property
    def ref_pattern(self) -> str:
        """构建服务使用的引用匹配模式，无约束时为空"""
        if self.branch_constraint is BranchConstraint.NONE:
            return ""
        return f"^refs/heads/{self.branch}$"

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_actions": [a.value for a in self.ordered_actions],
            "branch_constraint": self.branch_constraint.value,
            "branch": self.branch or None,
            "ref_pattern": self.ref_pattern or None,
        }


# =========================================================================
# 构建源描述
# =========================================================================


@dataclass(frozen=True)
class ManagedBuildSource:
    """内部托管代码仓的构建源 — 不带任何触发配置"""

    repository: ManagedRepositoryHandle

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "managed",
            "repository": self.repository.repository_name,
            "clone_url_http": self.repository.clone_url_http,
        }


@dataclass(frozen=True)
class HostedGitBuildSource:
    """托管 Git 仓库的构建源"""

    owner: str
    repo: str
    webhook: bool = False
    report_build_status: bool = False
    webhook_filters: tuple[FilterGroup, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "hosted_git",
            "owner": self.owner,
            "repo": self.repo,
            "webhook": self.webhook,
            "report_build_status": self.report_build_status,
            "webhook_filters": [g.to_dict() for g in self.webhook_filters],
        }


BuildSourceDescriptor = Union[ManagedBuildSource, HostedGitBuildSource]
