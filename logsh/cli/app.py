"""
logsh/cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.

명령어 구조:
    logsh --version
    logsh [-c CONN] [-a ACCOUNT] [--lang ko|en] [-v] <command>

    관리 명령:
        logsh connection add/list/remove/default/login/logout
        logsh account add/list/remove/default
        logsh config path

    플랫폼 명령:
        logsh whoami
        logsh query "..."
        logsh upload SCHEMA PATH

전역 옵션 우선순위:
    --connection/--account > LOGSH_CONNECTION/LOGSH_ACCOUNT > 저장된 기본값
    --lang > LOGSH_LANG > ko
"""

from __future__ import annotations

import click
from click import Command, Context, HelpFormatter

from logsh.config import ENV_LANG, get_env_str, get_version

from .commands import account_group, config_group, connection_group, query_command, upload_command, whoami_command
from .i18n import SUPPORTED_LANGS, set_lang, t
from .ui import configure_logging, print_warning

VERSION = get_version()

# 관리 명령 (플랫폼 명령과 분리 표시용)
MANAGEMENT_COMMANDS = {"connection", "account", "config"}


class GroupedCommandsGroup(click.Group):
    """명령어를 관리/플랫폼 명령으로 분리해서 표시하는 Click 그룹"""

    def list_commands(self, ctx: Context) -> list[str]:
        return list(self.commands)

    def format_commands(self, ctx: Context, formatter: HelpFormatter) -> None:
        commands: list[tuple[str, Command]] = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd))

        if not commands:
            return

        management: list[tuple[str, str]] = []
        platform: list[tuple[str, str]] = []
        for name, cmd in commands:
            help_text = cmd.get_short_help_str(limit=formatter.width)
            if name in MANAGEMENT_COMMANDS:
                management.append((name, help_text))
            else:
                platform.append((name, help_text))

        if management:
            with formatter.section("Management"):
                formatter.write_dl(management)
        if platform:
            with formatter.section("Platform"):
                formatter.write_dl(platform)


@click.group(cls=GroupedCommandsGroup)
@click.version_option(VERSION, prog_name="logsh")
@click.option("-c", "--connection", default=None, help="사용할 커넥션 이름 (기본: LOGSH_CONNECTION 또는 기본 커넥션)")
@click.option("-a", "--account", default=None, help="사용할 계정 ID 또는 라벨 (기본: LOGSH_ACCOUNT 또는 기본 계정)")
@click.option(
    "--lang",
    type=click.Choice(list(SUPPORTED_LANGS)),
    default=None,
    help="UI 언어 설정 / UI language (ko: 한국어, en: English)",
)
@click.option("-v", "--verbose", count=True, help="로그 상세도 (-v: INFO, -vv: DEBUG)")
@click.pass_context
def cli(ctx: Context, connection: str | None, account: str | None, lang: str | None, verbose: int) -> None:
    """logsh - 로그 플랫폼 CLI

    \b
    커넥션(서버)과 계정을 등록하고, 활성 계정으로 쿼리/업로드를 실행합니다.
    """
    lang = lang or get_env_str(ENV_LANG)
    set_lang(lang)
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["connection"] = connection
    ctx.obj["account"] = account
    ctx.obj["lang"] = lang
    ctx.obj["verbose"] = verbose


cli.add_command(connection_group)
cli.add_command(account_group)
cli.add_command(config_group)
cli.add_command(whoami_command)
cli.add_command(query_command)
cli.add_command(upload_command)


def main() -> None:
    """console_scripts 진입점"""
    try:
        cli()
    except KeyboardInterrupt:
        print_warning(t("common.cancelled"))
        raise SystemExit(130) from None


if __name__ == "__main__":
    main()
