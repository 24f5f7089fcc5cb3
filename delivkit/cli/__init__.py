"""delivkit 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click

from delivkit import __version__
from delivkit.core.config import init_config
from delivkit.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path", default="configs/default.yml",
    envvar="DELIVKIT_CONFIG", help="配置文件路径",
)
def main(config_path: str) -> None:
    """delivkit - 交付流水线代码仓来源管理"""
    setup_logging(
        level=os.getenv("DELIVKIT_LOG_LEVEL", "WARNING"),
        json_output=os.getenv("DELIVKIT_LOG_JSON", "") == "1",
    )
    init_config(config_path)


# 注册各领域子命令
from delivkit.cli.repo import register_commands as _reg_repo  # noqa: E402

_reg_repo(main)
