"""
logsh/cli/commands/platform.py - 플랫폼 API 명령

    logsh whoami
    logsh query [QUERY | -] [--timeout] [--json]
    logsh upload SCHEMA PATH [--timeout]

모든 명령은 활성 (커넥션, 계정)으로 인증된 요청을 보냅니다.
"""

from __future__ import annotations

import json
from typing import IO, Any

import click

from logsh.client import QueryResult
from logsh.exceptions import ValidationError

from ..context import get_client, handle_errors
from ..i18n import t
from ..ui import console, print_json, print_success, print_table


def parse_records(text: str) -> list[dict[str, Any]]:
    """업로드 입력 해석 (JSON 배열 또는 JSON Lines)

    Raises:
        ValidationError: JSON 해석 실패 또는 배열/객체가 아닌 값
    """
    stripped = text.strip()
    if not stripped:
        return []

    if stripped.startswith("["):
        try:
            data = json.loads(stripped)
        except ValueError as e:
            raise ValidationError("records", t("cmd.upload_bad_json", line=1), cause=e) from e
        if not isinstance(data, list):
            raise ValidationError("records", t("cmd.upload_not_array"))
        return data

    rows: list[dict[str, Any]] = []
    for number, line in enumerate(stripped.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            row = json.loads(line)
        except ValueError as e:
            raise ValidationError("records", t("cmd.upload_bad_json", line=number), cause=e) from e
        if not isinstance(row, dict):
            raise ValidationError("records", t("cmd.upload_not_array"))
        rows.append(row)
    return rows


def _read_query(query: str | None) -> str:
    if query is None or query == "-":
        return click.get_text_stream("stdin").read()
    return query


def _print_result(result: QueryResult) -> None:
    if not result.results:
        console.print(f"[dim]{t('cmd.query_empty')}[/dim]")
        return

    columns = result.header or list(result.results[0])
    print_table(
        t("cmd.query_rows", count=len(result)),
        columns,
        [[_cell(row.get(column)) if isinstance(row, dict) else "" for column in columns] for row in result.results],
    )


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


@click.command("whoami")
@handle_errors
def whoami_command() -> None:
    """현재 자격 증명의 사용자 확인"""
    client = get_client(click.get_current_context())
    context = client.context()
    me = client.whoami(context)
    click.echo(t("cmd.whoami", user_name=me.user_name, user_id=me.user_id, context=context.label))


@click.command("query")
@click.argument("query", required=False)
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None, help="읽기 타임아웃 (초)")
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
@handle_errors
def query_command(query: str | None, timeout: float | None, as_json: bool) -> None:
    """활성 계정에 쿼리 실행 (QUERY가 없거나 '-'이면 stdin에서 읽음)

    \b
    Examples:
        logsh query "Logs | take 10"
        echo "Logs | count" | logsh query --json
    """
    client = get_client(click.get_current_context())
    result = client.query(_read_query(query), timeout=timeout)

    if as_json:
        print_json({"header": result.header, "results": result.results})
        return
    _print_result(result)


@click.command("upload")
@click.argument("schema")
@click.argument("source", metavar="PATH", type=click.File("r", encoding="utf-8"))
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None, help="업로드 타임아웃 (초)")
@handle_errors
def upload_command(schema: str, source: IO[str], timeout: float | None) -> None:
    """레코드 업로드 (JSON 배열 또는 JSON Lines, PATH가 '-'이면 stdin)

    업로드는 재시도하지 않습니다 (중복 적재 방지).
    """
    client = get_client(click.get_current_context())
    rows = parse_records(source.read())
    context = client.context()
    count = client.upload(schema, rows, timeout=timeout, context=context)
    print_success(t("cmd.upload_done", count=count, schema=schema, context=context.label))
