"""核心数据模型 / 流水线定义 / 异常 测试"""

from __future__ import annotations

import dataclasses

import pytest

from delivkit.core.exceptions import (
    ConfigError,
    DelivkitError,
    InvalidRepositoryIdentifier,
    PipelineDefinitionError,
    ValidationError,
)
from delivkit.core.models import (
    BranchConstraint,
    EventAction,
    FilterGroup,
    ManagedBuildSource,
    ManagedRepositoryHandle,
    SecretValue,
)
from delivkit.core.pipeline import (
    Artifact,
    ManagedSourceAction,
    PipelineDefinition,
)

# =========================================================================
# FilterGroup
# =========================================================================


class TestFilterGroup:
    def test_in_event_of(self) -> None:
        g = FilterGroup.in_event_of(EventAction.PUSH)
        assert g.event_actions == {EventAction.PUSH}
        assert g.branch_constraint is BranchConstraint.NONE
        assert g.ref_pattern == ""

    def test_in_event_of_requires_action(self) -> None:
        with pytest.raises(ValidationError, match="事件"):
            FilterGroup.in_event_of()

    def test_and_branch_is_returns_new_group(self) -> None:
        base = FilterGroup.in_event_of(EventAction.PUSH)
        constrained = base.and_branch_is("main")
        assert base.branch_constraint is BranchConstraint.NONE
        assert constrained.branch_constraint is BranchConstraint.BRANCH
        assert constrained.ref_pattern == "^refs/heads/main$"

    def test_base_branch_rejects_push(self) -> None:
        with pytest.raises(ValidationError, match="PUSH"):
            FilterGroup.in_event_of(EventAction.PUSH).and_base_branch_is("main")

    def test_double_constraint_rejected(self) -> None:
        g = FilterGroup.in_event_of(EventAction.PULL_REQUEST_CREATED).and_base_branch_is("main")
        with pytest.raises(ValidationError, match="已有分支约束"):
            g.and_base_branch_is("dev")

    def test_empty_branch_rejected(self) -> None:
        with pytest.raises(ValidationError, match="分支名"):
            FilterGroup.in_event_of(EventAction.PUSH).and_branch_is("")

    def test_to_dict_unconstrained(self) -> None:
        g = FilterGroup.in_event_of(EventAction.PULL_REQUEST_UPDATED, EventAction.PUSH)
        assert g.to_dict() == {
            "event_actions": ["PUSH", "PULL_REQUEST_UPDATED"],
            "branch_constraint": "none",
            "branch": None,
            "ref_pattern": None,
        }


class TestSecrets:
    def test_secret_repr_masked(self) -> None:
        s = SecretValue(reference="prod/github-token")
        assert "prod/github-token" not in repr(s)
        assert "prod/github-token" not in str(s)

    def test_secret_holds_only_reference(self) -> None:
        assert [f.name for f in dataclasses.fields(SecretValue)] == ["reference"]

    def test_managed_build_source_dict(self) -> None:
        handle = ManagedRepositoryHandle("infra", clone_url_http="https://git.internal/infra")
        assert ManagedBuildSource(handle).to_dict() == {
            "type": "managed",
            "repository": "infra",
            "clone_url_http": "https://git.internal/infra",
        }


# =========================================================================
# PipelineDefinition
# =========================================================================


class TestPipelineDefinition:
    def test_add_stage(self) -> None:
        p = PipelineDefinition(name="release")
        stage = p.add_stage("Source")
        assert p.stage("Source") is stage
        assert p.stage("Build") is None

    def test_duplicate_stage_rejected(self) -> None:
        p = PipelineDefinition(name="release")
        p.add_stage("Source")
        with pytest.raises(PipelineDefinitionError, match="已存在阶段"):
            p.add_stage("Source")

    def test_empty_stage_name_rejected(self) -> None:
        with pytest.raises(PipelineDefinitionError):
            PipelineDefinition(name="release").add_stage("")

    def test_duplicate_action_rejected(self) -> None:
        stage = PipelineDefinition(name="release").add_stage("Source")
        action = ManagedSourceAction(
            action_name="Pull", repository=ManagedRepositoryHandle("infra"),
            branch="main", output=Artifact("Source"),
        )
        stage.add_action(action)
        with pytest.raises(PipelineDefinitionError, match="Pull"):
            stage.add_action(action)

    def test_to_dict(self) -> None:
        p = PipelineDefinition(name="release")
        p.add_stage("Source").add_action(ManagedSourceAction(
            action_name="Pull", repository=ManagedRepositoryHandle("infra"),
            branch="main", output=Artifact("Source"),
        ))
        assert p.to_dict() == {
            "name": "release",
            "stages": [{
                "name": "Source",
                "actions": [{
                    "provider": "managed",
                    "action_name": "Pull",
                    "repository": "infra",
                    "branch": "main",
                    "output": "Source",
                }],
            }],
        }


# =========================================================================
# exceptions.py
# =========================================================================


class TestExceptions:
    @pytest.mark.parametrize(("exc", "code"), [
        (ConfigError("x"), "CONFIG_ERROR"),
        (ValidationError("x"), "VALIDATION_ERROR"),
        (InvalidRepositoryIdentifier("x"), "INVALID_REPOSITORY_IDENTIFIER"),
        (PipelineDefinitionError("x"), "PIPELINE_DEFINITION_ERROR"),
    ])
    def test_codes(self, exc: DelivkitError, code: str) -> None:
        assert isinstance(exc, DelivkitError)
        assert exc.code == code

    def test_invalid_identifier_details(self) -> None:
        e = InvalidRepositoryIdentifier("acme")
        assert e.details == ["acme"]
        assert "owner/repo" in str(e)
