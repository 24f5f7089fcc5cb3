"""代码仓来源 - 内部托管 / 托管 Git / 可写托管 Git

职责：
- 向流水线追加 "Source" 阶段
- 生成构建任务的构建源描述（托管 Git 可附带 webhook 触发）
- 判断来源是否具备写回能力

所有来源均为不可变值对象；克隆地址由标识字段按需推导，不单独存储。
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from delivkit.core.exceptions import InvalidRepositoryIdentifier, ValidationError
from delivkit.core.models import (
    ExternalSecret,
    HostedGitBuildSource,
    ManagedBuildSource,
    ManagedRepositoryHandle,
    SecretValue,
)
from delivkit.core.pipeline import (
    Artifact,
    HostedGitSourceAction,
    ManagedSourceAction,
    PipelineDefinition,
    SourceAction,
)
from delivkit.services.repo.webhook import create_webhook_filters

logger = logging.getLogger(__name__)

SOURCE_STAGE_NAME = "Source"
SOURCE_ARTIFACT_NAME = "Source"
PULL_ACTION_NAME = "Pull"
DEFAULT_HOST = "github.com"


def parse_repository_identifier(identifier: str) -> tuple[str, str]:
    """把 "owner/repo" 拆分为 (owner, repo)

    异常:
        InvalidRepositoryIdentifier: 不是恰好一个 '/' 分隔的两段非空标识
    """
    if not isinstance(identifier, str) or identifier.count("/") != 1:
        raise InvalidRepositoryIdentifier(str(identifier))
    owner, repo = identifier.split("/", 1)
    if not owner or not repo or any(c.isspace() for c in identifier):
        raise InvalidRepositoryIdentifier(identifier)
    return owner, repo


class _SourceStageMixin(ABC):
    """"Source" 阶段的公共组装逻辑，子类只提供拉取动作"""

    def create_source_stage(self, pipeline: PipelineDefinition, branch: str) -> Artifact:
        """追加一个仅含一个拉取动作的 "Source" 阶段

        重复调用会再次追加同名阶段，由流水线定义拒绝。
        """
        if not branch:
            raise ValidationError("源阶段必须指定分支")
        stage = pipeline.add_stage(SOURCE_STAGE_NAME)
        output = Artifact(SOURCE_ARTIFACT_NAME)
        stage.add_action(self._pull_action(branch, output))
        logger.info(
            "已追加源阶段: %s@%s -> 流水线 %s", self.describe(), branch, pipeline.name,
        )
        return output

    @abstractmethod
    def _pull_action(self, branch: str, output: Artifact) -> SourceAction:
        """构造绑定到分支与输出产物的拉取动作"""

    @abstractmethod
    def describe(self) -> str:
        """简短可读标识"""


# =========================================================================
# 内部托管代码仓
# =========================================================================


@dataclass(frozen=True)
class ManagedRepositorySource(_SourceStageMixin):
    """内部托管代码仓来源

    构建源不支持 webhook 触发：create_build_source 忽略 webhook/branch 参数。
    """

    repository: ManagedRepositoryHandle

    allows_badge: ClassVar[bool] = False

    @property
    def repository_url_http(self) -> str:
        return self.repository.clone_url_http

    @property
    def repository_url_ssh(self) -> str:
        return self.repository.clone_url_ssh

    def _pull_action(self, branch: str, output: Artifact) -> ManagedSourceAction:
        return ManagedSourceAction(
            action_name=PULL_ACTION_NAME,
            repository=self.repository,
            branch=branch,
            output=output,
        )

    def create_build_source(
        self, context: Any, webhook: bool, branch: str | None = None,
    ) -> ManagedBuildSource:
        if webhook:
            # TODO: 确认内部托管仓库平台是否支持 webhook 触发构建后再实现
            logger.warning(
                "内部托管代码仓不支持 webhook 触发，忽略 webhook/branch 参数: %s",
                self.describe(),
            )
        return ManagedBuildSource(repository=self.repository)

    def describe(self) -> str:
        return self.repository.repository_name


# =========================================================================
# 托管 Git 代码仓
# =========================================================================


@dataclass(frozen=True)
class HostedGitRepositorySource(_SourceStageMixin):
    """托管 Git 代码仓来源（owner/repo + 访问令牌）

    token 只透传给拉取动作，不出现在 describe()、repr 或日志中。
    """

    repository: str
    token: SecretValue = field(repr=False)
    host: str = field(default=DEFAULT_HOST, kw_only=True)
    owner: str = field(init=False)
    repo: str = field(init=False)

    allows_badge: ClassVar[bool] = True

    def __post_init__(self) -> None:
        owner, repo = parse_repository_identifier(self.repository)
        if not self.host:
            raise ValidationError("托管 Git 主机名不能为空")
        object.__setattr__(self, "owner", owner)
        object.__setattr__(self, "repo", repo)

    @property
    def repository_url_http(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.repo}.git"

    @property
    def repository_url_ssh(self) -> str:
        return f"git@{self.host}:{self.owner}/{self.repo}.git"

    def _pull_action(self, branch: str, output: Artifact) -> HostedGitSourceAction:
        return HostedGitSourceAction(
            action_name=PULL_ACTION_NAME,
            owner=self.owner,
            repo=self.repo,
            branch=branch,
            oauth_token=self.token,
            output=output,
        )

    def create_build_source(
        self, context: Any, webhook: bool, branch: str | None = None,
    ) -> HostedGitBuildSource:
        """webhook 为 True 时附带构建状态回报和过滤组"""
        if not webhook:
            return HostedGitBuildSource(owner=self.owner, repo=self.repo)
        filters = tuple(create_webhook_filters(branch))
        logger.debug(
            "构建源 webhook 过滤组: %s branch=%s groups=%d",
            self.describe(), branch or "*", len(filters),
        )
        return HostedGitBuildSource(
            owner=self.owner,
            repo=self.repo,
            webhook=True,
            report_build_status=True,
            webhook_filters=filters,
        )

    def describe(self) -> str:
        return f"{self.owner}/{self.repo}"


# =========================================================================
# 写回能力
# =========================================================================


@dataclass(frozen=True)
class WriteTarget:
    """写回代码仓所需的部署密钥引用与提交身份"""

    write_key_secret: ExternalSecret | None
    commit_username: str
    commit_email: str

    @property
    def is_complete(self) -> bool:
        return bool(
            self.write_key_secret
            and self.write_key_secret.secret_arn
            and self.commit_username
            and self.commit_email
        )


class WriteCapability(ABC):
    """写回能力接口，仅可写来源实现

    外部对象可通过 WriteCapability.register() 声明具备该能力。
    """

    @abstractmethod
    def write_target(self) -> WriteTarget:
        """返回写回所需的密钥引用与提交身份"""


@dataclass(frozen=True)
class WritableHostedGitRepositorySource(HostedGitRepositorySource, WriteCapability):
    """可写托管 Git 代码仓来源

    供文档发布、自动版本提升等需要向仓库提交的下游步骤使用。
    新增字段不影响克隆地址和 webhook 行为。
    """

    write_key_secret: ExternalSecret = field(kw_only=True)
    commit_username: str = field(kw_only=True)
    commit_email: str = field(kw_only=True)

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.write_target().is_complete:
            raise ValidationError(
                "可写代码仓必须提供部署密钥、提交用户名和邮箱",
                details=[self.describe()],
            )

    def write_target(self) -> WriteTarget:
        return WriteTarget(
            write_key_secret=self.write_key_secret,
            commit_username=self.commit_username,
            commit_email=self.commit_email,
        )


AnyRepositorySource = Union[
    ManagedRepositorySource,
    HostedGitRepositorySource,
    WritableHostedGitRepositorySource,
]


def write_capability(candidate: object) -> WriteTarget | None:
    """取出候选来源的写回目标，不具备完整写回能力时返回 None"""
    if not isinstance(candidate, WriteCapability):
        return None
    target = candidate.write_target()
    return target if target.is_complete else None


def is_writable(candidate: object) -> bool:
    """候选来源是否可用于写回操作"""
    return write_capability(candidate) is not None
