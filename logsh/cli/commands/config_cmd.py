"""
logsh/cli/commands/config_cmd.py - 설정 파일 명령

    logsh config path [--exists] [--validate]
"""

from __future__ import annotations

import click

from logsh.registry.store import RegistryStore

from ..context import handle_errors
from ..i18n import t
from ..ui import print_error, print_success


@click.group("config")
def config_group() -> None:
    """설정 파일 관리"""


@config_group.command("path")
@click.option("--exists", "check_exists", is_flag=True, help="파일이 없으면 종료 코드 1")
@click.option("--validate", is_flag=True, help="파일을 해석할 수 있는지 검사")
@handle_errors
def config_path(check_exists: bool, validate: bool) -> None:
    """설정 파일 경로 출력 (LOGSH_CONFIG_PATH로 변경 가능)"""
    store = RegistryStore()
    click.echo(str(store.path))

    if (check_exists or validate) and not store.exists():
        print_error(t("cmd.config_missing", path=store.path))
        raise SystemExit(1)

    if validate:
        registry = store.load(strict=True)
        accounts = sum(len(profile.accounts) for profile in registry.list())
        print_success(t("cmd.config_valid", connections=len(registry), accounts=accounts))
