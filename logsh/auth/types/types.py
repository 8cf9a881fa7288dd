"""
logsh/auth/types/types.py - 인증 모듈의 핵심 타입 정의

이 모듈은 인증 시스템 전체에서 사용되는 기본 타입들을 정의합니다.

포함 항목:
    - AuthMethod: 계정 인증 방식 열거형 (PASSWORD, API_KEY, DEVICE_FLOW)
    - Prompter: 비밀번호 입력/디바이스 코드 안내를 담당하는 명령 계층 인터페이스
    - Provider: 인증 방식별 자격 증명 획득 전략의 추상 기본 클래스 (ABC)
    - 에러 클래스: AuthError, NoCredentialError, AuthenticationFailedError,
      ConnectionUnavailableError
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

from logsh.exceptions import LogshError

if TYPE_CHECKING:
    import requests

    from logsh.auth.cache.cache import SessionToken
    from logsh.registry.models import Account, ConnectionProfile

logger = logging.getLogger(__name__)


# =============================================================================
# Auth Method Enum
# =============================================================================


class AuthMethod(Enum):
    """계정 인증 방식 (닫힌 집합)

    - PASSWORD: 사용자 이름/비밀번호로 세션 토큰 발급 (대화형)
    - API_KEY: 장기 API 키를 그대로 Authorization 헤더로 사용
    - DEVICE_FLOW: OAuth 디바이스 코드 플로우로 세션 토큰 발급
    """

    PASSWORD = "interactive-password"
    API_KEY = "api-key"
    DEVICE_FLOW = "device-flow"

    def __str__(self) -> str:
        return self.value

    @property
    def uses_session_token(self) -> bool:
        """단기 세션 토큰을 사용하는 방식인지 여부"""
        return self is not AuthMethod.API_KEY

    @classmethod
    def parse(cls, value: str) -> AuthMethod:
        """CLI 입력값(password, api-key, device ...)을 AuthMethod로 변환

        Raises:
            ValueError: 알 수 없는 값
        """
        normalized = value.strip().lower().replace("_", "-")
        aliases = {
            "password": cls.PASSWORD,
            "basic": cls.PASSWORD,
            "interactive-password": cls.PASSWORD,
            "api-key": cls.API_KEY,
            "apikey": cls.API_KEY,
            "key": cls.API_KEY,
            "device": cls.DEVICE_FLOW,
            "device-flow": cls.DEVICE_FLOW,
            "oauth": cls.DEVICE_FLOW,
        }
        if normalized not in aliases:
            raise ValueError(f"알 수 없는 인증 방식: {value}")
        return aliases[normalized]


# =============================================================================
# Prompter Interface
# =============================================================================


class Prompter(ABC):
    """사용자 입력이 필요한 단계를 명령 계층에 위임하는 인터페이스

    코어는 터미널에 직접 접근하지 않습니다. CLI는 questionary/rich 기반
    구현을, 테스트는 고정 값을 반환하는 구현을 주입합니다.
    """

    @abstractmethod
    def password(self, username: str, connection: str) -> str:
        """비밀번호 입력을 받습니다."""

    @abstractmethod
    def device_code(self, verification_uri: str, user_code: str) -> None:
        """디바이스 플로우 인증 URL과 코드를 사용자에게 안내합니다."""


# =============================================================================
# Provider Interface (Abstract Base Class)
# =============================================================================


class Provider(ABC):
    """인증 방식별 자격 증명 획득 전략

    AuthMethod 하나당 구현 하나가 대응합니다 (provider.STRATEGIES 참조).
    모든 메서드는 완전한 응답을 받은 뒤에만 결과를 반환하며,
    저장(CredentialStore.put)은 호출자인 SessionManager가 수행합니다.
    """

    method: AuthMethod

    @abstractmethod
    def login(
        self,
        http: requests.Session,
        profile: ConnectionProfile,
        account: Account,
    ) -> SessionToken:
        """전체 로그인 교환을 수행하여 새 세션 토큰을 반환합니다.

        Raises:
            AuthenticationFailedError: 자격 증명 거부
            ConnectionUnavailableError: 네트워크/전송 실패
        """

    def refresh(
        self,
        http: requests.Session,
        profile: ConnectionProfile,
        account: Account,
        token: SessionToken,
    ) -> SessionToken:
        """refresh token으로 세션 토큰을 갱신합니다.

        기본 구현은 갱신을 지원하지 않으므로 전체 로그인으로 대체합니다.
        """
        return self.login(http, profile, account)


# =============================================================================
# Error Classes
# =============================================================================


class AuthError(LogshError):
    """인증 관련 기본 에러 클래스

    모든 인증 에러의 부모 클래스입니다.
    """


class NoCredentialError(AuthError):
    """저장된 자격 증명이 없음

    Attributes:
        ref: 자격 증명 참조 키 ("{connection}/{account_id}")
    """

    def __init__(self, ref: str):
        super().__init__(f"저장된 자격 증명이 없습니다: {ref}")
        self.ref = ref
        self.details["ref"] = ref


class AuthenticationFailedError(AuthError):
    """자격 증명이 거부됨 (잘못된 비밀번호, 만료된 refresh token 등)

    명령 계층은 이 에러를 받으면 재입력을 요청할 수 있습니다.

    Attributes:
        status: 인증 서버 HTTP 상태 코드 (있으면)
    """

    def __init__(
        self,
        message: str = "인증에 실패했습니다",
        status: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.status = status
        if status is not None:
            self.details["status"] = status


class ConnectionUnavailableError(AuthError):
    """인증 서버에 연결할 수 없음 (저장된 자격 증명은 변경하지 않음)

    Attributes:
        endpoint: 연결을 시도한 엔드포인트
    """

    def __init__(self, endpoint: str, message: str = "서버에 연결할 수 없습니다", cause: Exception | None = None):
        super().__init__(f"{message} ({endpoint})", cause)
        self.endpoint = endpoint
        self.details["endpoint"] = endpoint
