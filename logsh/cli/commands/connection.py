"""
logsh/cli/commands/connection.py - 커넥션 관리 명령

    logsh connection add NAME ENDPOINT [--default] [--insecure]
    logsh connection list [--json]
    logsh connection remove NAME
    logsh connection default NAME
    logsh connection login [NAME]
    logsh connection logout [NAME]
"""

from __future__ import annotations

import click

from logsh.auth.cache import ApiKeyCredential

from ..context import get_option, get_sessions, get_workspace, handle_errors
from ..i18n import t
from ..ui import console, print_info, print_json, print_success, print_table, print_warning


@click.group("connection")
def connection_group() -> None:
    """커넥션(서버 엔드포인트) 관리

    \b
    Examples:
        logsh connection add prod https://logship.example.com
        logsh connection list
        logsh connection default prod
        logsh connection login prod
    """


@connection_group.command("add")
@click.argument("name")
@click.argument("endpoint")
@click.option("--default", "make_default", is_flag=True, help="기본 커넥션으로 설정")
@click.option("--insecure", is_flag=True, help="TLS 인증서 검증 생략")
@handle_errors
def connection_add(name: str, endpoint: str, make_default: bool, insecure: bool) -> None:
    """커넥션 추가 (첫 커넥션은 자동으로 기본값)"""
    registry = get_workspace(click.get_current_context()).registry
    profile = registry.add(name, endpoint, insecure_skip_verify=insecure, make_default=make_default)

    print_success(t("connection.added", name=profile.name, endpoint=profile.endpoint))
    if profile.is_default:
        print_info(t("connection.default_set", name=profile.name))
    if insecure:
        print_warning(t("connection.insecure_warning", name=profile.name))


@connection_group.command("list")
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
@handle_errors
def connection_list(as_json: bool) -> None:
    """등록된 커넥션 목록"""
    registry = get_workspace(click.get_current_context()).registry
    profiles = list(registry.list())

    if as_json:
        print_json(
            [
                {
                    "name": p.name,
                    "endpoint": p.endpoint,
                    "default": p.is_default,
                    "insecure_skip_verify": p.insecure_skip_verify,
                    "accounts": sorted(p.accounts),
                    "default_account": p.default_account.account_id if p.default_account else None,
                    "added_at": p.added_at,
                }
                for p in profiles
            ]
        )
        return

    if not profiles:
        console.print(f"[dim]{t('connection.none_registered')}[/dim]")
        console.print(f"[dim]{t('connection.add_hint')}[/dim]")
        return

    print_table(
        t("connection.list_title"),
        ["", t("connection.col_name"), t("connection.col_endpoint"), t("connection.col_accounts")],
        [["*" if p.is_default else "", p.name, p.endpoint, len(p.accounts)] for p in profiles],
    )


@connection_group.command("remove")
@click.argument("name")
@handle_errors
def connection_remove(name: str) -> None:
    """커넥션 삭제 (계정과 자격 증명 포함)"""
    registry = get_workspace(click.get_current_context()).registry
    profile = registry.remove(name)

    print_success(t("connection.removed", name=profile.name))
    if profile.is_default:
        print_warning(t("connection.removed_was_default"))


@connection_group.command("default")
@click.argument("name")
@handle_errors
def connection_default(name: str) -> None:
    """기본 커넥션 변경"""
    registry = get_workspace(click.get_current_context()).registry
    profile = registry.set_default(name)
    print_success(t("connection.default_set", name=profile.name))


@connection_group.command("login")
@click.argument("name", required=False)
@handle_errors
def connection_login(name: str | None) -> None:
    """활성 계정으로 다시 로그인 (캐시된 세션 무시)"""
    ctx = click.get_current_context()
    context = get_sessions(ctx).login(name or get_option(ctx, "connection"), get_option(ctx, "account"))

    if isinstance(context.credential, ApiKeyCredential):
        print_success(t("connection.api_key_ready", context=context.label))
        return
    minutes = context.credential.remaining_seconds() // 60
    print_success(t("connection.logged_in", context=context.label, minutes=minutes))


@connection_group.command("logout")
@click.argument("name", required=False)
@handle_errors
def connection_logout(name: str | None) -> None:
    """활성 계정의 자격 증명 폐기"""
    ctx = click.get_current_context()
    account, removed = get_sessions(ctx).logout(name or get_option(ctx, "connection"), get_option(ctx, "account"))

    if removed:
        print_success(t("connection.logged_out", context=account.credential_ref))
    else:
        print_info(t("connection.nothing_to_logout", context=account.credential_ref))
