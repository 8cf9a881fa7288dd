"""
logsh/cli/context.py - 명령 실행 컨텍스트

click 컨텍스트(ctx.obj)에 전역 옵션과 Workspace를 보관하고,
명령 공통의 에러 처리/저장 규칙을 제공합니다.

종료 코드:
    0: 성공
    1: 분류된 에러 (LogshError)
    2: 사용법 오류 (click)
    130: 사용자 중단 (Ctrl+C)
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import click

from logsh.auth.resolver import ContextResolver
from logsh.auth.session import SessionManager
from logsh.client import LogshClient
from logsh.dispatch.client import build_http_session
from logsh.dispatch.dispatcher import Dispatcher
from logsh.exceptions import ConfigError, LogshError, format_error_for_user
from logsh.registry.store import RegistryStore, Workspace

from .i18n import t
from .ui import CliPrompter, print_error, print_warning

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _obj(ctx: click.Context) -> dict[str, Any]:
    root = ctx.find_root()
    root.ensure_object(dict)
    return root.obj


def get_option(ctx: click.Context, name: str) -> Any:
    """전역 옵션 값 (--connection, --account, --lang, --verbose)"""
    return _obj(ctx).get(name)


def get_workspace(ctx: click.Context) -> Workspace:
    """명령 실행 동안 공유하는 Workspace (처음 호출 시 로드)"""
    obj = _obj(ctx)
    if obj.get("workspace") is None:
        obj["workspace"] = Workspace(RegistryStore())
    return obj["workspace"]


def get_sessions(ctx: click.Context) -> SessionManager:
    obj = _obj(ctx)
    if obj.get("sessions") is None:
        obj["http"] = obj.get("http") or build_http_session()
        obj["sessions"] = SessionManager(get_workspace(ctx).registry, obj["http"], prompter=CliPrompter())
    return obj["sessions"]


def get_resolver(ctx: click.Context) -> ContextResolver:
    return get_sessions(ctx).resolver


def get_client(ctx: click.Context) -> LogshClient:
    """전역 --connection/--account가 적용된 API 클라이언트"""
    obj = _obj(ctx)
    sessions = get_sessions(ctx)
    return LogshClient(
        sessions,
        Dispatcher(obj["http"]),
        connection=obj.get("connection"),
        account=obj.get("account"),
    )


def _flush(ctx: click.Context) -> None:
    workspace = _obj(ctx).get("workspace")
    if workspace is not None and workspace.save_if_dirty():
        logger.debug("설정 저장: %s", workspace.store.path)


def handle_errors(func: F) -> F:
    """명령 공통 에러 처리

    - 명령이 끝나면 (실패하더라도) 변경된 레지스트리/자격 증명을 저장
    - LogshError: 커넥션/계정 정보와 함께 출력 후 종료 코드 1
    - KeyboardInterrupt: 종료 코드 130
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        ctx = click.get_current_context()
        exit_code = 0
        result = None
        try:
            result = func(*args, **kwargs)
        except KeyboardInterrupt:
            print_warning(t("common.cancelled"))
            exit_code = 130
        except LogshError as e:
            logger.debug("명령 실패: %r", e.to_dict())
            print_error(t("common.error_label", message=format_error_for_user(e)))
            exit_code = 1

        try:
            _flush(ctx)
        except ConfigError as e:
            print_error(t("common.save_failed", message=format_error_for_user(e)))
            exit_code = exit_code or 1

        if exit_code:
            raise SystemExit(exit_code)
        return result

    return wrapper  # type: ignore[return-value]
