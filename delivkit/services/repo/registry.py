"""代码仓来源注册表 - CRUD 管理

职责：
- 代码仓来源定义的注册、查询、列表、删除
- 支持 2 种类型：managed（内部托管）/ hosted_git（托管 Git，可带写回配置）
- 由注册条目构建对应的 RepositorySource

注册表只保存密钥引用（名称/ARN），不保存凭据本身。
"""

from __future__ import annotations

import logging
from typing import Any

from delivkit.core.exceptions import ConfigError, ValidationError
from delivkit.core.models import ExternalSecret, ManagedRepositoryHandle, SecretValue
from delivkit.core.registry import YamlRegistry
from delivkit.services.repo.sources import (
    AnyRepositorySource,
    HostedGitRepositorySource,
    ManagedRepositorySource,
    WritableHostedGitRepositorySource,
    parse_repository_identifier,
)

logger = logging.getLogger(__name__)

SOURCE_TYPES = ("managed", "hosted_git")
_WRITE_FIELDS = ("write_key_secret", "commit_username", "commit_email")


class RepoSourceRegistry(YamlRegistry):
    """代码仓来源注册表"""

    section_key = "sources"

    def __init__(self, registry_file: str = "") -> None:
        super().__init__(self._resolve_registry_file(registry_file, "repos_file"))

    def register_managed(
        self,
        name: str,
        repository_name: str,
        *,
        clone_url_http: str = "",
        clone_url_ssh: str = "",
    ) -> dict[str, Any]:
        """注册内部托管代码仓"""
        if not name:
            raise ValidationError("来源 name 为必填")
        if not repository_name:
            raise ValidationError("managed 类型必须指定 repository_name")
        entry: dict[str, Any] = {
            "source_type": "managed",
            "repository_name": repository_name,
            "clone_url_http": clone_url_http,
            "clone_url_ssh": clone_url_ssh,
        }
        self._put(name, entry)
        logger.info("代码仓来源已注册: %s (type=managed, repo=%s)", name, repository_name)
        return entry

    def register_hosted_git(
        self,
        name: str,
        repository: str,
        token: str,
        *,
        host: str = "",
        write_key_secret: str = "",
        commit_username: str = "",
        commit_email: str = "",
    ) -> dict[str, Any]:
        """注册托管 Git 代码仓

        token / write_key_secret 均为外部密钥引用。
        写回字段要么全部提供，要么全部留空。
        """
        if not name:
            raise ValidationError("来源 name 为必填")
        parse_repository_identifier(repository)
        if not token:
            raise ValidationError("hosted_git 类型必须指定 token 引用")
        write = {
            "write_key_secret": write_key_secret,
            "commit_username": commit_username,
            "commit_email": commit_email,
        }
        _check_write_fields(name, write)

        entry: dict[str, Any] = {
            "source_type": "hosted_git",
            "repository": repository,
            "token": token,
            "host": host,
        }
        entry.update({k: v for k, v in write.items() if v})
        self._put(name, entry)
        logger.info(
            "代码仓来源已注册: %s (type=hosted_git, repo=%s, writable=%s)",
            name, repository, bool(write_key_secret),
        )
        return entry

    def get(self, name: str) -> AnyRepositorySource | None:
        """由注册条目构建代码仓来源，未注册返回 None"""
        entry = self._get_raw(name)
        if entry is None:
            return None
        return build_source(name, entry)

    def list_all(self) -> list[dict[str, Any]]:
        """列出所有已注册来源（隐藏密钥引用）"""
        items = []
        for raw in self._list_raw():
            item = {k: v for k, v in raw.items() if k not in ("token", "write_key_secret")}
            item.setdefault("source_type", "hosted_git")
            item["writable"] = bool(raw.get("write_key_secret"))
            items.append(item)
        return items

    def remove(self, name: str) -> bool:
        """移除来源"""
        if not self._remove(name):
            return False
        logger.info("代码仓来源已移除: %s", name)
        return True


def _check_write_fields(name: str, write: dict[str, Any]) -> None:
    present = [k for k in _WRITE_FIELDS if write.get(k)]
    if present and len(present) != len(_WRITE_FIELDS):
        missing = [k for k in _WRITE_FIELDS if k not in present]
        raise ConfigError(f"来源 {name} 的写回配置不完整，缺少: {', '.join(missing)}")


def build_source(name: str, entry: dict[str, Any]) -> AnyRepositorySource:
    """把一条来源配置转换为对应的来源对象

    异常:
        ConfigError: 类型未知或写回配置不完整
        InvalidRepositoryIdentifier: 托管 Git 标识非法
    """
    source_type = entry.get("source_type", "hosted_git")
    if source_type not in SOURCE_TYPES:
        raise ConfigError(f"来源 {name} 的类型不受支持: {source_type}")

    if source_type == "managed":
        repository_name = entry.get("repository_name", "")
        if not repository_name:
            raise ConfigError(f"来源 {name} 缺少 repository_name")
        return ManagedRepositorySource(ManagedRepositoryHandle(
            repository_name=repository_name,
            clone_url_http=entry.get("clone_url_http", ""),
            clone_url_ssh=entry.get("clone_url_ssh", ""),
        ))

    if not entry.get("token"):
        raise ConfigError(f"来源 {name} 缺少 token 引用")
    host = entry.get("host") or _default_host()
    token = SecretValue(reference=entry["token"])
    _check_write_fields(name, entry)

    if entry.get("write_key_secret"):
        return WritableHostedGitRepositorySource(
            entry.get("repository", ""),
            token,
            host=host,
            write_key_secret=ExternalSecret(secret_arn=entry["write_key_secret"]),
            commit_username=entry["commit_username"],
            commit_email=entry["commit_email"],
        )
    return HostedGitRepositorySource(entry.get("repository", ""), token, host=host)


def _default_host() -> str:
    from delivkit.core.config import get_config
    return get_config().hosted_git_host
