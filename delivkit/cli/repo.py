"""代码仓来源管理命令"""

from __future__ import annotations

import json
from typing import Any

import click

from delivkit.core.exceptions import DelivkitError
from delivkit.services.repo.registry import RepoSourceRegistry
from delivkit.services.source_service import SourceService


def register_commands(main: click.Group) -> None:
    """注册代码仓来源相关命令"""
    main.add_command(repo_group)


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group(name="repo")
@click.option("--registry", "registry_file", default="", help="来源注册表文件（默认取配置）")
@click.pass_context
def repo_group(ctx: click.Context, registry_file: str) -> None:
    """代码仓来源管理"""
    ctx.obj = registry_file


@repo_group.command(name="list")
@click.pass_obj
def repo_list(registry_file: str) -> None:
    """列出已注册的代码仓来源"""
    sources = RepoSourceRegistry(registry_file).list_all()
    if not sources:
        click.echo("没有已注册的代码仓来源。")
        return
    for s in sources:
        loc = s.get("repository") or s.get("repository_name") or "-"
        flag = " writable" if s.get("writable") else ""
        click.echo(f"  {s['name']:20s} [{s.get('source_type', 'hosted_git'):10s}] {loc}{flag}")


@repo_group.command(name="add-hosted")
@click.argument("name")
@click.argument("repository")
@click.option("--token", required=True, help="访问令牌的密钥引用")
@click.option("--host", default="", help="托管 Git 主机名（默认取配置）")
@click.option("--write-key-secret", default="", help="部署密钥的密钥引用")
@click.option("--commit-username", default="", help="写回提交的用户名")
@click.option("--commit-email", default="", help="写回提交的邮箱")
@click.pass_obj
def repo_add_hosted(registry_file: str, **kwargs: Any) -> None:
    """注册托管 Git 代码仓（REPOSITORY 形如 owner/repo）"""
    try:
        RepoSourceRegistry(registry_file).register_hosted_git(
            kwargs["name"], kwargs["repository"], kwargs["token"],
            host=kwargs["host"],
            write_key_secret=kwargs["write_key_secret"],
            commit_username=kwargs["commit_username"],
            commit_email=kwargs["commit_email"],
        )
    except DelivkitError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"代码仓来源已注册: {kwargs['name']} ({kwargs['repository']})")


@repo_group.command(name="add-managed")
@click.argument("name")
@click.argument("repository_name")
@click.option("--clone-url-http", default="", help="HTTP 克隆地址")
@click.option("--clone-url-ssh", default="", help="SSH 克隆地址")
@click.pass_obj
def repo_add_managed(
    registry_file: str, name: str, repository_name: str,
    clone_url_http: str, clone_url_ssh: str,
) -> None:
    """注册内部托管代码仓"""
    try:
        RepoSourceRegistry(registry_file).register_managed(
            name, repository_name,
            clone_url_http=clone_url_http, clone_url_ssh=clone_url_ssh,
        )
    except DelivkitError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"代码仓来源已注册: {name} ({repository_name})")


@repo_group.command(name="remove")
@click.argument("name")
@click.pass_obj
def repo_remove(registry_file: str, name: str) -> None:
    """移除代码仓来源"""
    if RepoSourceRegistry(registry_file).remove(name):
        click.echo(f"代码仓来源已移除: {name}")
    else:
        click.echo(f"代码仓来源不存在: {name}")


@repo_group.command(name="describe")
@click.argument("name")
@click.pass_obj
def repo_describe(registry_file: str, name: str) -> None:
    """输出来源的可读标识"""
    try:
        click.echo(SourceService(registry_file).describe(name))
    except DelivkitError as e:
        raise click.ClickException(str(e)) from e


@repo_group.command(name="capabilities")
@click.argument("name")
@click.pass_obj
def repo_capabilities(registry_file: str, name: str) -> None:
    """输出来源能力（徽章 / 写回 / 克隆地址）"""
    try:
        _echo_json(SourceService(registry_file).capabilities(name))
    except DelivkitError as e:
        raise click.ClickException(str(e)) from e


@repo_group.command(name="source-stage")
@click.argument("name")
@click.option("--branch", default="", help="拉取分支（默认取配置）")
@click.option("--pipeline", "pipeline_name", default="", help="流水线名称")
@click.pass_obj
def repo_source_stage(registry_file: str, name: str, branch: str, pipeline_name: str) -> None:
    """输出追加源阶段后的流水线定义"""
    try:
        _echo_json(SourceService(registry_file).source_stage(
            name, branch=branch, pipeline_name=pipeline_name,
        ))
    except DelivkitError as e:
        raise click.ClickException(str(e)) from e


@repo_group.command(name="build-source")
@click.argument("name")
@click.option("--webhook/--no-webhook", default=False, help="是否附带 webhook 触发")
@click.option("--branch", default="", help="webhook 限定分支（为空则任意分支）")
@click.pass_obj
def repo_build_source(registry_file: str, name: str, webhook: bool, branch: str) -> None:
    """输出构建任务的构建源描述"""
    try:
        _echo_json(SourceService(registry_file).build_source(
            name, webhook=webhook, branch=branch or None,
        ))
    except DelivkitError as e:
        raise click.ClickException(str(e)) from e
