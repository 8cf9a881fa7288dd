"""
logsh/exceptions.py - 통합 예외 계층 구조

애플리케이션 전체에서 사용되는 예외 클래스들을 정의합니다.
하위 계층의 에러는 항상 분류된 타입으로 전달되며, 일반 예외로 뭉개지지 않습니다.
명령 계층은 타입을 보고 재시도/재입력/즉시 실패를 결정합니다.

예외 계층 구조:
    LogshError (베이스)
    ├── ConfigError (설정 파일 읽기/쓰기 실패)
    ├── ValidationError (입력 검증)
    ├── RegistryError (커넥션 레지스트리 변경)
    │   ├── DuplicateNameError
    │   ├── NotFoundError
    │   └── InvalidEndpointError
    ├── NoActiveContextError (활성 커넥션/계정 결정 실패)
    ├── AuthError (인증) - logsh.auth.types에서 정의
    │   ├── NoCredentialError
    │   ├── AuthenticationFailedError
    │   └── ConnectionUnavailableError
    └── DispatchError (HTTP 요청) - logsh.dispatch.errors에서 정의
        ├── UnauthorizedError
        ├── ClientError
        ├── ServerError
        └── TransportFailureError

Usage:
    from logsh.exceptions import NotFoundError, format_error_for_user

    try:
        registry.set_default("prod")
    except NotFoundError as e:
        print(format_error_for_user(e))
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# 베이스 예외
# =============================================================================


class LogshError(Exception):
    """logsh 기본 예외 클래스

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
        connection: 사용 중이던 커넥션 이름 (있으면)
        account: 사용 중이던 계정 식별자 (있으면)
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}
        self.connection: str | None = None
        self.account: str | None = None

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def with_context(self, connection: str | None, account: str | None = None) -> LogshError:
        """에러에 커넥션/계정 정보를 기록 (이미 있으면 유지)"""
        if connection and not self.connection:
            self.connection = connection
            self.details["connection"] = connection
        if account and not self.account:
            self.account = account
            self.details["account"] = account
        return self

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 설정 / 입력
# =============================================================================


class ConfigError(LogshError):
    """설정 파일을 읽거나 쓸 수 없을 때 발생

    Attributes:
        path: 문제가 된 설정 파일 경로
    """

    def __init__(self, path: str, message: str, cause: Exception | None = None):
        super().__init__(f"설정 오류 [{path}]: {message}", cause)
        self.path = path
        self.details["path"] = path


class ValidationError(LogshError):
    """입력 검증 오류"""

    def __init__(self, field: str, message: str, cause: Exception | None = None):
        super().__init__(f"검증 오류 [{field}]: {message}", cause)
        self.field = field
        self.details["field"] = field


# =============================================================================
# 레지스트리
# =============================================================================


class RegistryError(LogshError):
    """커넥션 레지스트리 변경 오류 (재시도하지 않음)"""


class DuplicateNameError(RegistryError):
    """같은 이름의 커넥션/계정이 이미 있음"""

    def __init__(self, kind: str, name: str):
        super().__init__(f"이미 존재하는 {kind}입니다: {name}")
        self.kind = kind
        self.name = name
        self.details.update({"kind": kind, "name": name})


class NotFoundError(RegistryError):
    """커넥션/계정을 찾을 수 없음"""

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind}을(를) 찾을 수 없습니다: {name}")
        self.kind = kind
        self.name = name
        self.details.update({"kind": kind, "name": name})


class InvalidEndpointError(RegistryError):
    """엔드포인트 URL이 잘못됨 (파싱 실패 또는 scheme 누락)"""

    def __init__(self, endpoint: str, reason: str):
        super().__init__(f"잘못된 엔드포인트 '{endpoint}': {reason}")
        self.endpoint = endpoint
        self.reason = reason
        self.details.update({"endpoint": endpoint, "reason": reason})


# =============================================================================
# 컨텍스트 결정
# =============================================================================


class NoActiveContextError(LogshError):
    """활성 커넥션/계정을 결정할 수 없음

    Attributes:
        reason: 실패 사유 코드
            (no_connections, connection_not_found, no_default_connection,
             no_accounts, account_not_found, no_default_account)
        source: 재정의 값의 출처 ("argument", "env" 또는 None)
    """

    def __init__(
        self,
        reason: str,
        message: str,
        name: str | None = None,
        source: str | None = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.name = name
        self.source = source
        self.details.update({"reason": reason, "name": name, "source": source})


# =============================================================================
# 유틸리티
# =============================================================================


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지

    커스텀 예외는 사용 중이던 커넥션/계정을 함께 표시합니다.
    """
    if not isinstance(error, LogshError):
        return str(error)

    text = str(error)
    if error.connection and error.account:
        return f"{text} [{error.connection}/{error.account}]"
    if error.connection:
        return f"{text} [{error.connection}]"
    return text
