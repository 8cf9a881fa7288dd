"""
logsh/dispatch/errors.py - HTTP 요청 에러 분류

플랫폼 API 응답/전송 실패를 분류된 예외로 변환하고,
재시도 가능 여부를 판단합니다.

주요 구성 요소:
- ErrorCategory: 에러 분류
- DispatchError 계층: UnauthorizedError, ClientError, ServerError, TransportFailureError
- error_for_status: HTTP 상태 코드 → 예외
- categorize_error: 예외 → ErrorCategory
- is_retryable: 재시도 가능 여부 판단
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import requests

from logsh.exceptions import LogshError

logger = logging.getLogger(__name__)

# 에러 메시지에 포함할 응답 본문 최대 길이
MAX_BODY_PREVIEW = 500


class ErrorCategory(Enum):
    """요청 에러 분류"""

    UNAUTHORIZED = "unauthorized"  # 401/403 - 재인증 대상, 여기서는 재시도 안함
    CLIENT_ERROR = "client_error"  # 그 밖의 4xx - 즉시 실패
    SERVER_ERROR = "server_error"  # 5xx - 멱등 요청만 재시도
    NETWORK = "network"  # 연결 거부, DNS 실패 등
    TIMEOUT = "timeout"  # 연결/읽기 타임아웃
    UNKNOWN = "unknown"


# 재시도 가능한 카테고리
RETRYABLE_CATEGORIES: frozenset[ErrorCategory] = frozenset(
    {ErrorCategory.SERVER_ERROR, ErrorCategory.NETWORK, ErrorCategory.TIMEOUT}
)


# =============================================================================
# 예외
# =============================================================================


class DispatchError(LogshError):
    """플랫폼 API 요청 실패 기본 클래스

    Attributes:
        status: HTTP 상태 코드 (전송 실패면 None)
        body: 응답 본문 (있으면)
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: Any = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.status = status
        self.body = body
        if status is not None:
            self.details["status"] = status


class UnauthorizedError(DispatchError):
    """401/403 - 자격 증명이 거부됨"""

    def __init__(self, status: int, body: Any = None):
        super().__init__(f"권한이 없습니다 (HTTP {status})", status, body)


class ClientError(DispatchError):
    """4xx - 요청이 잘못됨 (재시도하지 않음)"""

    def __init__(self, status: int, body: Any = None):
        super().__init__(f"요청이 거부되었습니다 (HTTP {status}){_preview(body)}", status, body)


class ServerError(DispatchError):
    """5xx - 서버 오류"""

    def __init__(self, status: int, body: Any = None):
        super().__init__(f"서버 오류 (HTTP {status}){_preview(body)}", status, body)


class TransportFailureError(DispatchError):
    """연결 거부, DNS 실패, 타임아웃 등 응답을 받지 못함"""

    def __init__(self, message: str = "서버에 연결할 수 없습니다", cause: Exception | None = None):
        super().__init__(message, cause=cause)


def _preview(body: Any) -> str:
    if body is None or body == "":
        return ""
    text = body if isinstance(body, str) else str(body)
    text = text.strip()
    if len(text) > MAX_BODY_PREVIEW:
        text = text[:MAX_BODY_PREVIEW] + "..."
    return f": {text}"


# =============================================================================
# 분류
# =============================================================================


def error_for_status(status: int, body: Any = None) -> DispatchError:
    """실패 HTTP 상태 코드를 예외로 변환"""
    if status in (401, 403):
        return UnauthorizedError(status, body)
    if status >= 500:
        return ServerError(status, body)
    return ClientError(status, body)


def is_transport_failure(error: BaseException) -> bool:
    """응답 자체를 받지 못한 실패인지 (requests 예외 기준)"""
    return isinstance(error, (requests.ConnectionError, requests.Timeout))


def categorize_error(error: BaseException) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    Args:
        error: 분류할 예외 (DispatchError 또는 requests 예외)

    Returns:
        에러 카테고리
    """
    if isinstance(error, UnauthorizedError):
        return ErrorCategory.UNAUTHORIZED
    if isinstance(error, ServerError):
        return ErrorCategory.SERVER_ERROR
    if isinstance(error, ClientError):
        return ErrorCategory.CLIENT_ERROR

    if isinstance(error, TransportFailureError):
        if error.cause is None:
            return ErrorCategory.NETWORK
        error = error.cause

    # ConnectTimeout은 ConnectionError이기도 하므로 Timeout을 먼저 검사
    if isinstance(error, requests.Timeout):
        return ErrorCategory.TIMEOUT
    if isinstance(error, (requests.ConnectionError, ConnectionError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def is_retryable(category: ErrorCategory) -> bool:
    """재시도 가능한 카테고리인지 확인"""
    return category in RETRYABLE_CATEGORIES
