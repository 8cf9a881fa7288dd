"""
logsh/client.py - 명령 계층 API 클라이언트

SessionManager(자격 증명 확보)와 Dispatcher(요청 실행)를 묶어
플랫폼 엔드포인트별 메서드를 제공합니다.

재인증 규칙:
    UnauthorizedError(401/403)를 받으면 자격 증명을 한 번 다시 확보하고
    같은 요청을 한 번만 재시도합니다. 두 번째도 거부되면
    AuthenticationFailedError로 실패합니다.

Example:
    client = LogshClient(manager, Dispatcher(http), connection="prod")
    me = client.whoami()
    result = client.query("Logs | take 10")
"""

from __future__ import annotations

import gzip
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from logsh.auth.cache.cache import format_time, utcnow
from logsh.auth.session import ActiveContext, SessionManager
from logsh.auth.types import AuthenticationFailedError
from logsh.dispatch.dispatcher import DispatchResponse, Dispatcher, RequestDescriptor
from logsh.dispatch.errors import UnauthorizedError
from logsh.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WhoAmI:
    """현재 자격 증명의 사용자"""

    user_id: str
    user_name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WhoAmI:
        return cls(user_id=str(data.get("userId", "")), user_name=str(data.get("userName", "")))


@dataclass(frozen=True)
class RemoteAccount:
    """서버에 등록된 계정 (사용자가 접근 가능한 것)"""

    account_id: str
    account_name: str
    permissions: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemoteAccount:
        return cls(
            account_id=str(data.get("accountId", "")),
            account_name=str(data.get("accountName", "")),
            permissions=tuple(data.get("permissions") or ()),
        )


@dataclass
class QueryResult:
    """쿼리 결과 표

    Attributes:
        header: 열 이름 목록
        results: 행 목록 ({열 이름: 값})
    """

    header: list[str] = field(default_factory=list)
    results: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_body(cls, body: Any) -> QueryResult:
        if not isinstance(body, dict):
            return cls()
        header = body.get("header") or body.get("Header") or []
        results = body.get("results") or body.get("Results") or []
        return cls(header=list(header), results=list(results))

    def __len__(self) -> int:
        return len(self.results)


def build_records(schema: str, rows: list[dict[str, Any]], now: datetime | None = None) -> list[dict[str, Any]]:
    """업로드 레코드 생성

    행에 Timestamp/timestamp 필드가 있으면 그 값을, 없으면 현재 시각을 사용합니다.

    Raises:
        ValidationError: 스키마가 비어 있거나 행이 객체가 아님
    """
    if not schema or not schema.strip():
        raise ValidationError("schema", "스키마 이름이 비어 있습니다")
    now = now or utcnow()
    default_timestamp = format_time(now)

    records: list[dict[str, Any]] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValidationError("records", f"{index}번째 레코드가 객체가 아닙니다")
        timestamp = row.get("Timestamp") or row.get("timestamp") or default_timestamp
        records.append({"Schema": schema.strip(), "Timestamp": str(timestamp), "Data": row})
    return records


class LogshClient:
    """플랫폼 API 클라이언트

    Args:
        sessions: 세션 관리자
        dispatcher: 요청 실행기
        connection: 명시적 커넥션 이름 (--connection)
        account: 명시적 계정 ID/라벨 (--account)
    """

    def __init__(
        self,
        sessions: SessionManager,
        dispatcher: Dispatcher,
        connection: str | None = None,
        account: str | None = None,
    ):
        self.sessions = sessions
        self.dispatcher = dispatcher
        self.connection = connection
        self.account = account

    def context(self) -> ActiveContext:
        return self.sessions.acquire_context(self.connection, self.account)

    def execute(self, request: RequestDescriptor, context: ActiveContext | None = None) -> DispatchResponse:
        """요청 실행 (401/403이면 재인증 후 한 번만 재시도)

        Raises:
            AuthenticationFailedError: 재인증 후에도 거부됨
            DispatchError: 그 밖의 요청 실패
            NoActiveContextError / ConnectionUnavailableError: 세션 확보 실패
        """
        context = context or self.context()
        try:
            return self.dispatcher.execute(context, request)
        except UnauthorizedError as first:
            logger.info("자격 증명이 거부되어 다시 인증합니다: %s", context.label)
            context = self.sessions.reacquire(context)
            try:
                return self.dispatcher.execute(context, request)
            except UnauthorizedError as second:
                self.sessions.credentials.invalidate(context.account.credential_ref)
                raise AuthenticationFailedError(
                    "다시 인증한 뒤에도 요청이 거부되었습니다",
                    status=second.status,
                    cause=first,
                ).with_context(context.profile.name, context.account.account_id) from second

    # =========================================================================
    # 플랫폼 엔드포인트
    # =========================================================================

    def whoami(self, context: ActiveContext | None = None) -> WhoAmI:
        """GET /whoami"""
        return WhoAmI.from_dict(self._body_dict(self.execute(RequestDescriptor.get("/whoami"), context)))

    def list_remote_accounts(
        self, include_all: bool = False, context: ActiveContext | None = None
    ) -> list[RemoteAccount]:
        """GET /users/{userId}/accounts?allIfAdmin=

        Args:
            include_all: 관리자면 모든 계정 포함
            context: 이미 확보한 컨텍스트 (없으면 새로 확보)
        """
        context = context or self.context()
        me = self.whoami(context)
        response = self.execute(
            RequestDescriptor.get(
                f"/users/{me.user_id}/accounts",
                params={"allIfAdmin": "true" if include_all else "false"},
            ),
            context,
        )
        body = response.body if isinstance(response.body, list) else []
        return [RemoteAccount.from_dict(item) for item in body if isinstance(item, dict)]

    def query(self, text: str, timeout: float | None = None, context: ActiveContext | None = None) -> QueryResult:
        """POST /search/{accountId}/kusto

        Raises:
            ValidationError: 빈 쿼리
        """
        if not text or not text.strip():
            raise ValidationError("query", "쿼리가 비어 있습니다")
        context = context or self.context()
        request = RequestDescriptor.query(
            f"/search/{context.account.account_id}/kusto",
            {"query": text, "variables": []},
            timeout=timeout,
        )
        return QueryResult.from_body(self.execute(request, context).body)

    def upload(
        self,
        schema: str,
        rows: list[dict[str, Any]],
        timeout: float | None = None,
        context: ActiveContext | None = None,
    ) -> int:
        """POST /inflow/{accountId} (gzip JSON, 비멱등)

        Returns:
            업로드한 레코드 수
        """
        records = build_records(schema, rows)
        if not records:
            raise ValidationError("records", "업로드할 레코드가 없습니다")

        context = context or self.context()
        payload = gzip.compress(json.dumps(records, ensure_ascii=False).encode("utf-8"), compresslevel=1)
        logger.debug("업로드 %d건 (gzip %d bytes)", len(records), len(payload))
        request = RequestDescriptor.upload(
            f"/inflow/{context.account.account_id}",
            payload,
            headers={"Content-Type": "application/json", "Content-Encoding": "gzip"},
            timeout=timeout,
        )
        self.execute(request, context)
        return len(records)

    def delete_remote_account(self, account_id: str, context: ActiveContext | None = None) -> None:
        """DELETE /accounts/{accountId} (비멱등, 재시도하지 않음)

        Raises:
            ValidationError: 빈 계정 ID
        """
        account_id = (account_id or "").strip()
        if not account_id:
            raise ValidationError("account_id", "계정 ID가 비어 있습니다")
        self.execute(RequestDescriptor.delete(f"/accounts/{account_id}"), context)
        logger.info("원격 계정 삭제: %s", account_id)

    @staticmethod
    def _body_dict(response: DispatchResponse) -> dict[str, Any]:
        return response.body if isinstance(response.body, dict) else {}
