"""
logsh/cli/ui/console.py - Rich 콘솔 유틸리티

일관된 콘솔 출력을 위한 함수들.
명령 결과는 stdout(console), 상태/에러 메시지와 로그는 stderr(err_console)로 보냅니다.
"""

import json
import logging
import platform

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from logsh.config import ENV_LOG_LEVEL, LogConfig, get_env_str


def get_console(stderr: bool = False) -> Console:
    """Rich Console 인스턴스를 생성하고 반환합니다."""
    is_windows = platform.system().lower() == "windows"

    return Console(
        stderr=stderr,
        color_system="auto",
        highlight=False,
        soft_wrap=True,
        markup=True,
        emoji=not is_windows,
    )


# 전역 콘솔 인스턴스
console = get_console()
err_console = get_console(stderr=True)


def configure_logging(verbose: int = 0) -> logging.Logger:
    """logsh 패키지 logger에 Rich 핸들러를 설정합니다.

    레벨: LOGSH_LOG_LEVEL이 있으면 그 값, 없으면 -v 횟수
    (0: WARNING, 1: INFO, 2+: DEBUG)

    Args:
        verbose: -v 반복 횟수

    Returns:
        logging.Logger: 설정된 "logsh" logger
    """
    config = LogConfig.from_env()
    if verbose > 0 or not get_env_str(ENV_LOG_LEVEL):
        config.level = LogConfig.level_for_verbosity(verbose)

    logger = logging.getLogger("logsh")
    logger.setLevel(getattr(logging, config.level, logging.WARNING))

    # 이미 핸들러가 설정되어 있으면 레벨만 갱신
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=err_console, rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.propagate = False

    # urllib3 연결 로그는 DEBUG에서만
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose >= 2 else logging.WARNING)
    return logger


# =============================================================================
# 표준 출력 스타일 (이모지 없이 Rich 스타일만 사용)
# =============================================================================

# 상태 심볼
SYMBOL_SUCCESS = "✓"  # 완료
SYMBOL_ERROR = "✗"  # 에러
SYMBOL_WARNING = "!"  # 경고
SYMBOL_INFO = "•"  # 정보


def print_success(message: str) -> None:
    """성공 메시지 출력 (초록색 체크마크)"""
    err_console.print(f"{SYMBOL_SUCCESS} {message}", style="green", markup=False, highlight=False)


def print_error(message: str) -> None:
    """에러 메시지 출력 (빨간색 X)

    메시지에 사용자 입력이 섞일 수 있으므로 markup 해석 없이 출력합니다.
    """
    err_console.print(f"{SYMBOL_ERROR} {message}", style="red", markup=False, highlight=False)


def print_warning(message: str) -> None:
    """경고 메시지 출력 (노란색 경고)"""
    err_console.print(f"{SYMBOL_WARNING} {message}", style="yellow", markup=False, highlight=False)


def print_info(message: str) -> None:
    """정보 메시지 출력 (파란색 정보)"""
    err_console.print(f"{SYMBOL_INFO} {message}", style="blue", markup=False, highlight=False)


def print_table(
    title: str,
    columns: list[str],
    rows: list[list],
) -> None:
    """테이블 형식으로 데이터를 출력합니다.

    Args:
        title: 테이블 제목
        columns: 컬럼 헤더 리스트
        rows: 행 데이터 리스트
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")

    for column in columns:
        table.add_column(column)

    for row in rows:
        table.add_row(*["" if cell is None else str(cell) for cell in row])

    console.print(table)


def print_json(data: object) -> None:
    """JSON 출력 (stdout, 파이프 친화적)"""
    click.echo(json.dumps(data, ensure_ascii=False, indent=2, default=str))
