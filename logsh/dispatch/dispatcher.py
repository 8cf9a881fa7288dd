"""
logsh/dispatch/dispatcher.py - 인증된 HTTP 요청 실행

활성 컨텍스트(엔드포인트 + 자격 증명)를 받아 요청을 보내고,
응답을 분류합니다.

    - 2xx/3xx: DispatchResponse 반환
    - 401/403: UnauthorizedError (여기서는 재시도 안함, 재인증은 호출자 담당)
    - 그 밖의 4xx: ClientError 즉시 발생
    - 5xx, 전송 실패: 멱등 요청만 RetryPolicy에 따라 재시도,
      소진 시 ServerError / TransportFailureError

Example:
    dispatcher = Dispatcher(build_http_session())
    response = dispatcher.execute(context, RequestDescriptor.get("/whoami"))
    print(response.body)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import requests

from logsh.config import get_query_timeout, get_upload_timeout

from .client import build_http_session, request_timeout
from .errors import DispatchError, TransportFailureError, categorize_error, error_for_status
from .retry import RetryPolicy

if TYPE_CHECKING:
    from logsh.auth.session import ActiveContext

logger = logging.getLogger(__name__)

# 부작용이 없는 HTTP 메서드
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


@dataclass(frozen=True)
class RequestDescriptor:
    """보낼 요청 기술

    Attributes:
        method: HTTP 메서드
        path: 엔드포인트 기준 상대 경로 ("/search/...")
        body: 원시 요청 본문 (json과 동시에 쓰지 않음)
        json: JSON 요청 본문
        params: 쿼리 문자열
        headers: 추가 헤더
        idempotent: 재시도 가능 여부 (None이면 메서드로 판단)
        timeout: 읽기 타임아웃 (초, None이면 쿼리 기본값)
    """

    method: str
    path: str
    body: bytes | None = None
    json: Any = None
    params: Mapping[str, Any] | None = None
    headers: Mapping[str, str] | None = None
    idempotent: bool | None = None
    timeout: float | None = None

    @classmethod
    def get(cls, path: str, params: Mapping[str, Any] | None = None, timeout: float | None = None) -> RequestDescriptor:
        return cls("GET", path, params=params, timeout=timeout)

    @classmethod
    def query(cls, path: str, payload: Any, timeout: float | None = None) -> RequestDescriptor:
        """조회용 POST (부작용이 없으므로 멱등으로 취급)"""
        return cls("POST", path, json=payload, idempotent=True, timeout=timeout)

    @classmethod
    def upload(
        cls,
        path: str,
        body: bytes,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> RequestDescriptor:
        """데이터 업로드 (재시도 시 중복 적재 가능하므로 비멱등)"""
        return cls(
            "POST",
            path,
            body=body,
            headers=headers,
            idempotent=False,
            timeout=timeout if timeout is not None else get_upload_timeout(),
        )

    @classmethod
    def delete(cls, path: str) -> RequestDescriptor:
        """리소스 삭제 (재시도하지 않음)"""
        return cls("DELETE", path, idempotent=False)

    @property
    def is_idempotent(self) -> bool:
        if self.idempotent is not None:
            return self.idempotent
        return self.method.upper() in SAFE_METHODS

    @property
    def read_timeout(self) -> float:
        return self.timeout if self.timeout is not None else get_query_timeout()

    def url_for(self, base_url: str) -> str:
        path = self.path if self.path.startswith("/") else f"/{self.path}"
        return f"{base_url.rstrip('/')}{path}"


@dataclass(frozen=True)
class DispatchResponse:
    """성공 응답

    Attributes:
        status: HTTP 상태 코드
        headers: 응답 헤더
        body: JSON 응답이면 디코딩된 값, 아니면 텍스트
    """

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    @classmethod
    def from_response(cls, response: requests.Response) -> DispatchResponse:
        return cls(status=response.status_code, headers=dict(response.headers), body=decode_body(response))


def decode_body(response: requests.Response) -> Any:
    """Content-Type이 JSON이면 디코딩, 아니면 텍스트 (본문이 없으면 None)"""
    if not response.content:
        return None
    content_type = response.headers.get("Content-Type", "")
    if "json" in content_type.lower():
        try:
            return response.json()
        except ValueError:
            logger.debug("JSON 응답 디코딩 실패, 텍스트로 반환")
    return response.text


class Dispatcher:
    """인증된 요청 실행기

    Args:
        http: requests.Session (None이면 기본 헤더가 설정된 새 세션)
        policy: 재시도 정책
        sleep: 대기 함수 (테스트에서 주입)
        clock: 경과 시간 측정용 단조 시계
    """

    def __init__(
        self,
        http: requests.Session | None = None,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.http = http or build_http_session()
        self.policy = policy or RetryPolicy.from_env()
        self.sleep = sleep
        self.clock = clock

    def execute(self, context: ActiveContext, request: RequestDescriptor) -> DispatchResponse:
        """요청 실행

        Raises:
            UnauthorizedError: 401/403
            ClientError: 그 밖의 4xx
            ServerError: 5xx (재시도 소진 또는 비멱등)
            TransportFailureError: 응답을 받지 못함 (재시도 소진 또는 비멱등)
        """
        url = request.url_for(context.base_url)
        headers = {"Authorization": context.auth_header}
        if request.headers:
            headers.update(request.headers)

        started = self.clock()
        attempt = 0
        while True:
            attempt += 1
            outcome = self._attempt(context, request, url, headers)
            if isinstance(outcome, DispatchResponse):
                return outcome

            error = outcome
            error.with_context(context.profile.name, context.account.account_id)
            category = categorize_error(error)
            if not self.policy.should_retry(attempt, self.clock() - started, category, request.is_idempotent):
                logger.debug("%s %s 실패 (%d회 시도): %s", request.method, request.path, attempt, category.value)
                raise error

            delay = self.policy.get_delay(attempt - 1)
            logger.info(
                "%s %s 재시도 %d/%d (%.2f초 후): %s",
                request.method,
                request.path,
                attempt + 1,
                self.policy.max_attempts,
                delay,
                error.message,
            )
            self.sleep(delay)

    def _attempt(
        self,
        context: ActiveContext,
        request: RequestDescriptor,
        url: str,
        headers: dict[str, str],
    ) -> DispatchResponse | DispatchError:
        """한 번 시도하고 성공 응답 또는 분류된 에러를 반환"""
        try:
            response = self.http.request(
                request.method,
                url,
                params=request.params,
                data=request.body,
                json=request.json,
                headers=headers,
                timeout=request_timeout(request.read_timeout),
                verify=context.verify_tls,
            )
        except requests.RequestException as e:
            return TransportFailureError(f"서버에 연결할 수 없습니다 ({context.base_url})", cause=e)

        logger.debug("%s %s -> %d", request.method, request.path, response.status_code)
        if response.status_code < 400:
            return DispatchResponse.from_response(response)
        return error_for_status(response.status_code, decode_body(response))
