"""
logsh/cli/ui/prompts.py - 대화형 입력 (questionary)

코어의 Prompter 인터페이스를 터미널 입력으로 구현합니다.
입력 도중 Ctrl+C 또는 입력 취소(None)는 KeyboardInterrupt로 전달되어
명령 계층에서 종료 코드 130으로 처리됩니다.
"""

from __future__ import annotations

import questionary
from rich.panel import Panel

from logsh.auth.types import Prompter
from logsh.cli.i18n import t

from .console import err_console


def ask_secret(message: str) -> str:
    """비밀 값 입력 (화면에 표시하지 않음)

    Raises:
        KeyboardInterrupt: 사용자가 취소함
    """
    try:
        value = questionary.password(message).ask()
    except KeyboardInterrupt:
        raise KeyboardInterrupt(t("common.cancelled")) from None

    if value is None:
        raise KeyboardInterrupt(t("common.cancelled"))
    return value


class CliPrompter(Prompter):
    """questionary/rich 기반 Prompter"""

    def password(self, username: str, connection: str) -> str:
        return ask_secret(t("common.prompt_password", username=username, connection=connection))

    def device_code(self, verification_uri: str, user_code: str) -> None:
        lines = [
            t("common.device_code_open", url=verification_uri),
            t("common.device_code_enter", code=f"[bold]{user_code}[/bold]"),
            "",
            f"[dim]{t('common.device_code_waiting')}[/dim]",
        ]
        err_console.print(Panel("\n".join(lines), title=t("common.device_code_title"), border_style="cyan"))
