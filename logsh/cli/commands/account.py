"""
logsh/cli/commands/account.py - 계정 관리 명령

계정은 활성 커넥션(--connection, LOGSH_CONNECTION, 기본 커넥션)에 속합니다.

    logsh account add ACCOUNT_ID --auth {password,api-key,device-flow} [--label] [--username] [--api-key]
    logsh account list [--remote] [--include-all] [--json]
    logsh account default REF
    logsh account remove REF [--remote]
"""

from __future__ import annotations

from datetime import datetime

import click

from logsh.auth.cache import ApiKeyCredential, CredentialStore, SessionToken, utcnow
from logsh.auth.provider.api_key import ApiKeyProvider
from logsh.auth.types import AuthMethod
from logsh.exceptions import ValidationError
from logsh.registry.models import Account

from ..context import get_client, get_option, get_resolver, get_workspace, handle_errors
from ..i18n import t
from ..ui import ask_secret, console, print_info, print_json, print_success, print_table

AUTH_CHOICES = ("password", "api-key", "device-flow")


def _active_profile_name(ctx: click.Context) -> str:
    return get_resolver(ctx).resolve_profile(get_option(ctx, "connection")).name


def credential_status(store: CredentialStore, account: Account, now: datetime | None = None) -> str:
    """자격 증명 상태 표시 문자열"""
    now = now or utcnow()
    credential = store.find(account.credential_ref)
    if credential is None:
        return t("common.cred_none")
    if isinstance(credential, ApiKeyCredential):
        return t("common.cred_api_key")
    if store.is_valid(credential, now):
        return t("common.cred_valid", minutes=credential.remaining_seconds(now) // 60)
    if isinstance(credential, SessionToken) and store.can_refresh(credential, now):
        return t("common.cred_refreshable")
    return t("common.cred_expired")


@click.group("account")
def account_group() -> None:
    """활성 커넥션의 계정 관리

    \b
    Examples:
        logsh account add 0f3c... --label ops --auth api-key
        logsh account add 0f3c... --label me --auth password --username alice
        logsh -c prod account list --remote
    """


@account_group.command("add")
@click.argument("account_id")
@click.option("--label", default=None, help="계정 라벨 (기본: 계정 ID)")
@click.option(
    "--auth",
    "auth",
    type=click.Choice(AUTH_CHOICES),
    default="password",
    show_default=True,
    help="인증 방식",
)
@click.option("--username", default=None, help="비밀번호 인증용 사용자 이름")
@click.option("--api-key", "api_key", default=None, help="API 키 (생략 시 입력 요청)")
@click.option("--default", "make_default", is_flag=True, help="기본 계정으로 설정")
@handle_errors
def account_add(
    account_id: str,
    label: str | None,
    auth: str,
    username: str | None,
    api_key: str | None,
    make_default: bool,
) -> None:
    """활성 커넥션에 계정 추가"""
    ctx = click.get_current_context()
    registry = get_workspace(ctx).registry
    method = AuthMethod.parse(auth)
    connection = _active_profile_name(ctx)

    credential = None
    if method is AuthMethod.API_KEY:
        secret = api_key if api_key is not None else ask_secret(t("common.prompt_api_key"))
        credential = ApiKeyProvider.credential(secret)
    elif api_key is not None:
        raise ValidationError("api_key", "--api-key는 api-key 인증에서만 사용할 수 있습니다")

    account = registry.add_account(
        connection,
        account_id,
        label,
        method,
        username=username,
        make_default=make_default,
    )
    if credential is not None:
        registry.credentials.put(account.credential_ref, credential)

    print_success(t("account.added", connection=connection, account=account.display_name, method=method))
    if account.is_default:
        print_info(t("account.default_set", connection=connection, account=account.display_name))


@account_group.command("list")
@click.option("--remote", is_flag=True, help="서버에서 접근 가능한 계정 조회")
@click.option("--include-all", "include_all", is_flag=True, help="관리자면 모든 계정 포함 (--remote)")
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
@handle_errors
def account_list(remote: bool, include_all: bool, as_json: bool) -> None:
    """계정 목록 (로컬 등록 또는 --remote)"""
    ctx = click.get_current_context()
    if remote:
        _list_remote(ctx, include_all, as_json)
        return

    profile = get_resolver(ctx).resolve_profile(get_option(ctx, "connection"))
    store = get_workspace(ctx).credentials
    accounts = [profile.accounts[key] for key in sorted(profile.accounts)]

    if as_json:
        print_json(
            [
                {
                    "account_id": a.account_id,
                    "label": a.label,
                    "auth_method": a.auth_method.value,
                    "username": a.username,
                    "default": a.is_default,
                    "credential": credential_status(store, a),
                }
                for a in accounts
            ]
        )
        return

    if not accounts:
        console.print(f"[dim]{t('account.none_registered', connection=profile.name)}[/dim]")
        console.print(f"[dim]{t('account.add_hint')}[/dim]")
        return

    print_table(
        t("account.list_title", connection=profile.name),
        [
            "",
            t("account.col_id"),
            t("account.col_label"),
            t("account.col_auth"),
            t("account.col_username"),
            t("account.col_credential"),
        ],
        [
            [
                "*" if a.is_default else "",
                a.account_id,
                a.label,
                a.auth_method.value,
                a.username or "",
                credential_status(store, a),
            ]
            for a in accounts
        ],
    )


def _list_remote(ctx: click.Context, include_all: bool, as_json: bool) -> None:
    client = get_client(ctx)
    profile = get_resolver(ctx).resolve_profile(get_option(ctx, "connection"))
    remote_accounts = client.list_remote_accounts(include_all=include_all)

    if as_json:
        print_json(
            [
                {
                    "account_id": r.account_id,
                    "account_name": r.account_name,
                    "permissions": list(r.permissions),
                    "registered": r.account_id in profile.accounts,
                }
                for r in remote_accounts
            ]
        )
        return

    if not remote_accounts:
        console.print(f"[dim]{t('account.remote_none')}[/dim]")
        return

    print_table(
        t("account.remote_title", connection=profile.name),
        [t("account.col_id"), t("account.col_name"), t("account.col_permissions"), t("account.col_registered")],
        [
            [
                r.account_id,
                r.account_name,
                ", ".join(r.permissions),
                t("common.yes") if r.account_id in profile.accounts else "",
            ]
            for r in remote_accounts
        ],
    )


@account_group.command("default")
@click.argument("ref")
@handle_errors
def account_default(ref: str) -> None:
    """활성 커넥션의 기본 계정 변경 (계정 ID 또는 라벨)"""
    ctx = click.get_current_context()
    connection = _active_profile_name(ctx)
    account = get_workspace(ctx).registry.set_default_account(connection, ref)
    print_success(t("account.default_set", connection=connection, account=account.display_name))


@account_group.command("remove")
@click.argument("ref")
@click.option("--remote", is_flag=True, help="서버에서도 계정 삭제 (등록되지 않은 계정은 ID로 지정)")
@handle_errors
def account_remove(ref: str, remote: bool) -> None:
    """활성 커넥션에서 계정 삭제 (자격 증명 포함)

    --remote를 주면 활성 자격 증명으로 서버의 계정을 먼저 삭제합니다.
    """
    ctx = click.get_current_context()
    connection = _active_profile_name(ctx)
    registry = get_workspace(ctx).registry
    local = registry.find_account(connection, ref)

    if remote:
        account_id = local.account_id if local is not None else ref
        get_client(ctx).delete_remote_account(account_id)
        print_success(t("account.remote_deleted", connection=connection, account=account_id))
        if local is None:
            return

    account = registry.remove_account(connection, ref)
    print_success(t("account.removed", connection=connection, account=account.display_name))
