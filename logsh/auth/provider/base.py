"""
logsh/auth/provider/base.py - Provider 공통 구현

인증 서버와의 HTTP 교환, 실패 분류, 토큰 응답 해석을 담당합니다.

실패 분류:
    - 인증 거부 (HTTP 400/401/403, invalid_grant, access_denied, expired_token)
      → AuthenticationFailedError
    - 전송 실패 (연결 거부, DNS, 타임아웃) 및 인증 서버 5xx
      → ConnectionUnavailableError
"""

from __future__ import annotations

import base64
import json
import logging
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import requests

from logsh.config import settings
from logsh.dispatch.client import request_timeout
from logsh.registry.models import ConnectionProfile

from ..cache import SessionToken, utcnow
from ..cache.cache import parse_time
from ..types import AuthenticationFailedError, ConnectionUnavailableError, Prompter, Provider

logger = logging.getLogger(__name__)

# 인증 거부로 취급하는 HTTP 상태 코드
AUTH_REJECTION_STATUSES = frozenset({400, 401, 403})

# 인증 거부로 취급하는 OAuth 에러 코드
AUTH_REJECTION_CODES = frozenset(
    {
        "invalid_grant",
        "invalid_client",
        "unauthorized_client",
        "access_denied",
        "expired_token",
    }
)


def is_auth_rejection(status: int | None, error_code: str | None = None) -> bool:
    """인증 서버 응답이 자격 증명 거부인지 확인"""
    if error_code and error_code in AUTH_REJECTION_CODES:
        return True
    return status in AUTH_REJECTION_STATUSES


def jwt_expiry(token: str) -> datetime | None:
    """JWT payload의 exp 클레임 (서명은 검증하지 않음, 해석 불가 시 None)"""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    payload = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload))
        exp = claims["exp"]
        return datetime.fromtimestamp(float(exp), tz=timezone.utc)
    except (ValueError, TypeError, KeyError, OverflowError, OSError):
        return None


def build_session_token(
    access_token: str,
    now: datetime,
    expires_in: Any = None,
    expires_at: Any = None,
    refresh_token: str | None = None,
    refresh_expires_in: Any = None,
) -> SessionToken:
    """토큰 응답 필드로 SessionToken 생성

    만료 시각 결정 순서: expires_at → expires_in → JWT exp 클레임 → 기본 수명(3600초)
    """
    expires: datetime | None = None
    if expires_at:
        try:
            expires = parse_time(str(expires_at))
        except ValueError:
            logger.debug("expiresAt 해석 실패: %r", expires_at)
    if expires is None and expires_in is not None:
        try:
            expires = now + timedelta(seconds=float(expires_in))
        except (TypeError, ValueError):
            logger.debug("expiresIn 해석 실패: %r", expires_in)
    if expires is None:
        expires = jwt_expiry(access_token)
    if expires is None:
        expires = now + timedelta(seconds=settings.DEFAULT_TOKEN_LIFETIME_SECONDS)

    refresh_expires: datetime | None = None
    if refresh_token and refresh_expires_in is not None:
        try:
            refresh_expires = now + timedelta(seconds=float(refresh_expires_in))
        except (TypeError, ValueError):
            refresh_expires = None

    return SessionToken(
        access_token=access_token,
        issued_at=now,
        expires_at=expires,
        refresh_token=refresh_token or None,
        refresh_expires_at=refresh_expires,
    )


class BaseProvider(Provider):
    """HTTP 기반 Provider 공통 기능

    Args:
        prompter: 비밀번호 입력/디바이스 코드 안내 (None이면 비대화형)
        now: 현재 UTC 시각 함수 (테스트에서 주입)
        sleep: 대기 함수 (디바이스 플로우 폴링)
        timeout: 인증 요청 읽기 타임아웃 (초)
    """

    def __init__(
        self,
        prompter: Prompter | None = None,
        now: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = settings.AUTH_TIMEOUT_SECONDS,
    ):
        self.prompter = prompter
        self.now = now
        self.sleep = sleep
        self.timeout = timeout

    def _require_prompter(self) -> Prompter:
        if self.prompter is None:
            raise AuthenticationFailedError("대화형 입력을 사용할 수 없어 로그인할 수 없습니다")
        return self.prompter

    def _request(
        self,
        http: requests.Session,
        profile: ConnectionProfile,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> requests.Response:
        """인증 서버 요청 (전송 실패/5xx는 ConnectionUnavailableError)"""
        try:
            response = http.request(
                method,
                url,
                timeout=request_timeout(self.timeout),
                verify=not profile.insecure_skip_verify,
                **kwargs,
            )
        except requests.RequestException as e:
            raise ConnectionUnavailableError(profile.endpoint, cause=e) from e

        logger.debug("%s %s -> %d", method, url, response.status_code)
        if response.status_code >= 500:
            raise ConnectionUnavailableError(
                profile.endpoint, f"인증 서버 오류 (HTTP {response.status_code})"
            )
        return response

    @staticmethod
    def _payload(response: requests.Response) -> dict[str, Any]:
        """JSON 객체 응답 (해석할 수 없으면 빈 딕셔너리)"""
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _reject(self, response: requests.Response, message: str) -> AuthenticationFailedError:
        """실패 응답을 AuthenticationFailedError로 변환"""
        data = self._payload(response)
        code = data.get("error")
        description = data.get("error_description") or data.get("message")
        detail = ", ".join(str(x) for x in (code, description) if x)
        if detail:
            message = f"{message} ({detail})"
        return AuthenticationFailedError(message, status=response.status_code)
