"""RepoSourceRegistry / SourceService 单元测试"""

from __future__ import annotations

import pytest

from delivkit.core.config import init_config, reset_config
from delivkit.core.exceptions import ConfigError, InvalidRepositoryIdentifier, ValidationError
from delivkit.services.repo.registry import RepoSourceRegistry, build_source
from delivkit.services.repo.sources import (
    HostedGitRepositorySource,
    ManagedRepositorySource,
    WritableHostedGitRepositorySource,
    is_writable,
)
from delivkit.services.source_service import SourceService
from delivkit.utils.yaml_io import load_yaml, save_yaml


@pytest.fixture(autouse=True)
def _clean_config():
    reset_config()
    yield
    reset_config()


class TestRepoSourceRegistry:
    """代码仓来源注册表测试"""

    @pytest.fixture()
    def reg(self, tmp_path):
        return RepoSourceRegistry(registry_file=str(tmp_path / "sources.yml"))

    def test_register_hosted(self, reg) -> None:
        entry = reg.register_hosted_git("widgets", "acme/widgets", "prod/github-token")
        assert entry["source_type"] == "hosted_git"
        src = reg.get("widgets")
        assert type(src) is HostedGitRepositorySource
        assert src.describe() == "acme/widgets"

    def test_register_writable(self, reg) -> None:
        reg.register_hosted_git(
            "widgets", "acme/widgets", "prod/github-token",
            write_key_secret="arn:secret:deploy-key",
            commit_username="release-bot", commit_email="bot@acme.dev",
        )
        src = reg.get("widgets")
        assert isinstance(src, WritableHostedGitRepositorySource)
        assert is_writable(src)

    def test_register_managed(self, reg) -> None:
        reg.register_managed("infra", "infra-core", clone_url_http="https://git.internal/infra-core")
        src = reg.get("infra")
        assert isinstance(src, ManagedRepositorySource)
        assert src.describe() == "infra-core"
        assert src.repository_url_http == "https://git.internal/infra-core"

    def test_invalid_identifier_rejected_on_register(self, reg) -> None:
        with pytest.raises(InvalidRepositoryIdentifier):
            reg.register_hosted_git("bad", "acme", "tok")
        assert reg.get("bad") is None

    def test_partial_write_config_rejected(self, reg) -> None:
        with pytest.raises(ConfigError, match="commit_email"):
            reg.register_hosted_git(
                "w", "acme/widgets", "tok",
                write_key_secret="arn", commit_username="bot",
            )

    def test_missing_fields(self, reg) -> None:
        with pytest.raises(ValidationError, match="name"):
            reg.register_hosted_git("", "acme/widgets", "tok")
        with pytest.raises(ValidationError, match="token"):
            reg.register_hosted_git("w", "acme/widgets", "")
        with pytest.raises(ValidationError, match="repository_name"):
            reg.register_managed("m", "")

    def test_list_hides_secrets(self, reg) -> None:
        reg.register_hosted_git(
            "widgets", "acme/widgets", "prod/github-token",
            write_key_secret="arn:secret:deploy-key",
            commit_username="release-bot", commit_email="bot@acme.dev",
        )
        reg.register_managed("infra", "infra-core")
        items = {i["name"]: i for i in reg.list_all()}
        assert "token" not in items["widgets"]
        assert "write_key_secret" not in items["widgets"]
        assert items["widgets"]["writable"] is True
        assert items["infra"]["writable"] is False

    def test_hand_edited_entry_without_type(self, tmp_path) -> None:
        save_yaml(
            tmp_path / "sources.yml",
            {"sources": {"w": {"repository": "acme/widgets", "token": "t"}}},
        )
        reg = RepoSourceRegistry(registry_file=str(tmp_path / "sources.yml"))
        assert reg.get("w").describe() == "acme/widgets"
        (item,) = reg.list_all()
        assert item["source_type"] == "hosted_git"

    def test_null_section(self, tmp_path) -> None:
        f = tmp_path / "null.yml"
        f.write_text("sources: null\n", encoding="utf-8")
        reg = RepoSourceRegistry(registry_file=str(f))
        assert reg.get("w") is None
        assert reg.list_all() == []
        reg.register_managed("infra", "infra-core")
        assert reg.get("infra").describe() == "infra-core"

    def test_remove(self, reg) -> None:
        reg.register_managed("infra", "infra-core")
        assert reg.remove("infra") is True
        assert reg.remove("infra") is False
        assert reg.get("infra") is None

    def test_persisted_without_raw_secret_objects(self, reg, tmp_path) -> None:
        reg.register_hosted_git("widgets", "acme/widgets", "prod/github-token")
        data = load_yaml(tmp_path / "sources.yml")
        assert data["sources"]["widgets"]["token"] == "prod/github-token"

    def test_host_from_config(self, tmp_path) -> None:
        cfg = tmp_path / "cfg.yml"
        save_yaml(cfg, {"hosted_git_host": "git.example.org"})
        init_config(str(cfg))
        reg = RepoSourceRegistry(registry_file=str(tmp_path / "sources.yml"))
        reg.register_hosted_git("widgets", "acme/widgets", "tok")
        assert reg.get("widgets").repository_url_ssh == "git@git.example.org:acme/widgets.git"


class TestBuildSource:
    def test_unknown_type(self) -> None:
        with pytest.raises(ConfigError, match="svn"):
            build_source("x", {"source_type": "svn"})

    def test_hand_edited_invalid_identifier(self) -> None:
        with pytest.raises(InvalidRepositoryIdentifier):
            build_source("x", {"source_type": "hosted_git", "repository": "a/b/c", "token": "t"})

    def test_missing_token(self) -> None:
        with pytest.raises(ConfigError, match="token"):
            build_source("x", {"source_type": "hosted_git", "repository": "a/b"})


class TestSourceService:
    @pytest.fixture()
    def svc(self, tmp_path):
        svc = SourceService(registry_file=str(tmp_path / "sources.yml"))
        svc.registry.register_hosted_git("widgets", "acme/widgets", "prod/github-token")
        svc.registry.register_managed("infra", "infra-core")
        return svc

    def test_unregistered_raises(self, svc) -> None:
        with pytest.raises(ValidationError, match="未注册"):
            svc.describe("nope")

    def test_source_stage_uses_default_branch(self, svc) -> None:
        result = svc.source_stage("widgets")
        assert result["name"] == "delivery"
        assert result["output_artifact"] == "Source"
        (stage,) = result["stages"]
        (action,) = stage["actions"]
        assert action["branch"] == "main"
        assert action["oauth_token"] == "***"

    def test_build_source(self, svc) -> None:
        data = svc.build_source("widgets", webhook=True, branch="main")
        assert data["report_build_status"] is True
        assert len(data["webhook_filters"]) == 2

    def test_capabilities(self, svc) -> None:
        caps = svc.capabilities("infra")
        assert caps["allows_badge"] is False
        assert caps["writable"] is False
        assert svc.capabilities("widgets")["repository_url_http"] == \
            "https://github.com/acme/widgets.git"
