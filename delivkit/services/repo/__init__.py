"""代码仓来源模块

拆分说明：
- sources.py: 三种来源实现与写回能力判断
- webhook.py: webhook 过滤组推导
- registry.py: 来源定义的 YAML 注册表
"""

from delivkit.services.repo.registry import RepoSourceRegistry, build_source
from delivkit.services.repo.sources import (
    HostedGitRepositorySource,
    ManagedRepositorySource,
    WritableHostedGitRepositorySource,
    WriteCapability,
    WriteTarget,
    is_writable,
    parse_repository_identifier,
    write_capability,
)
from delivkit.services.repo.webhook import create_webhook_filters

__all__ = [
    "RepoSourceRegistry",
    "build_source",
    "ManagedRepositorySource",
    "HostedGitRepositorySource",
    "WritableHostedGitRepositorySource",
    "WriteCapability",
    "WriteTarget",
    "is_writable",
    "write_capability",
    "parse_repository_identifier",
    "create_webhook_filters",
]
