# logsh/cli/ui - 콘솔 출력과 대화형 입력 (rich, questionary)
"""
CLI 전용 UI 컴포넌트 모듈 (콘솔 출력, 비밀 값 입력 등)
"""

# Direct imports (rich/questionary are commonly used, no lazy import needed)
from .console import (
    SYMBOL_ERROR,
    SYMBOL_INFO,
    SYMBOL_SUCCESS,
    SYMBOL_WARNING,
    configure_logging,
    console,
    err_console,
    get_console,
    print_error,
    print_info,
    print_json,
    print_success,
    print_table,
    print_warning,
)
from .prompts import CliPrompter, ask_secret

__all__ = [
    "SYMBOL_ERROR",
    "SYMBOL_INFO",
    "SYMBOL_SUCCESS",
    "SYMBOL_WARNING",
    "configure_logging",
    "console",
    "err_console",
    "get_console",
    "print_error",
    "print_info",
    "print_json",
    "print_success",
    "print_table",
    "print_warning",
    "CliPrompter",
    "ask_secret",
]
