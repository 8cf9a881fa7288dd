"""
logsh/auth/provider/device.py - OAuth 디바이스 코드 플로우 Provider

흐름:
    1. GET {endpoint}/auth/oauth 로 OAuth 설정 조회 (204면 미설정)
    2. deviceEndpoint 에 client_id/scope 전송 → device_code, user_code, verification_uri
    3. Prompter로 URL과 코드를 안내
    4. tokenEndpoint 를 interval 간격으로 폴링
       - authorization_pending: 계속 대기
       - slow_down: 간격 5초 증가
       - access_denied / expired_token: 인증 실패
    5. 갱신은 tokenEndpoint 에 grant_type=refresh_token
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import requests

from logsh.config import settings
from logsh.registry.models import Account, ConnectionProfile

from ..cache import SessionToken
from ..types import AuthenticationFailedError, AuthMethod
from .base import BaseProvider, build_session_token, is_auth_rejection

logger = logging.getLogger(__name__)

OAUTH_CONFIG_PATH = "/auth/oauth"
DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"

# 서버가 expires_in을 주지 않을 때 디바이스 코드 수명 (초)
DEFAULT_DEVICE_CODE_LIFETIME = 600


def seconds_or_default(value: Any, default: float) -> float:
    """응답의 초 단위 값 (없거나 숫자가 아니거나 0 이하면 기본값)"""
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        if value is not None:
            logger.debug("초 단위 값 해석 실패: %r", value)
        return float(default)
    return seconds if seconds > 0 else float(default)


@dataclass(frozen=True)
class OAuthConfig:
    """서버가 알려주는 OAuth 설정"""

    client_id: str
    authorize_endpoint: str
    token_endpoint: str
    device_endpoint: str | None = None
    scopes: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OAuthConfig:
        """/auth/oauth 응답에서 생성

        Raises:
            AuthenticationFailedError: 필수 필드 누락
        """
        client_id = data.get("clientId")
        token_endpoint = data.get("tokenEndpoint")
        if not client_id or not token_endpoint:
            raise AuthenticationFailedError("OAuth 설정에 clientId/tokenEndpoint가 없습니다")
        return cls(
            client_id=str(client_id),
            authorize_endpoint=str(data.get("authorizeEndpoint") or ""),
            token_endpoint=str(token_endpoint),
            device_endpoint=data.get("deviceEndpoint") or None,
            scopes=tuple(data.get("scopes") or ()),
        )


class DeviceFlowProvider(BaseProvider):
    """OAuth 디바이스 코드 플로우

    Args:
        clock: 폴링 마감 판단용 단조 시계 (테스트에서 주입)
    """

    method = AuthMethod.DEVICE_FLOW

    def __init__(self, *args: Any, clock: Callable[[], float] = time.monotonic, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.clock = clock

    def discover(self, http: requests.Session, profile: ConnectionProfile) -> OAuthConfig:
        """서버의 OAuth 설정 조회

        Raises:
            AuthenticationFailedError: 서버에 OAuth가 설정되지 않음
            ConnectionUnavailableError: 전송 실패
        """
        response = self._request(http, profile, "GET", f"{profile.endpoint}{OAUTH_CONFIG_PATH}")
        if response.status_code == 204:
            raise AuthenticationFailedError(f"'{profile.name}' 서버에 OAuth가 설정되어 있지 않습니다")
        if response.status_code >= 400:
            raise self._reject(response, "OAuth 설정을 가져오지 못했습니다")
        return OAuthConfig.from_dict(self._payload(response))

    def login(
        self,
        http: requests.Session,
        profile: ConnectionProfile,
        account: Account,
    ) -> SessionToken:
        prompter = self._require_prompter()
        config = self.discover(http, profile)
        if not config.device_endpoint:
            raise AuthenticationFailedError("서버가 디바이스 코드 플로우를 지원하지 않습니다")

        logger.info("디바이스 코드 플로우 시작: %s", account.credential_ref)
        response = self._request(
            http,
            profile,
            "POST",
            config.device_endpoint,
            data={"client_id": config.client_id, "scope": " ".join(config.scopes)},
        )
        if response.status_code >= 400:
            raise self._reject(response, "디바이스 코드 발급에 실패했습니다")

        details = self._payload(response)
        device_code = details.get("device_code")
        user_code = details.get("user_code")
        verification_uri = details.get("verification_uri") or details.get("verification_url")
        if not device_code or not user_code or not verification_uri:
            raise AuthenticationFailedError("디바이스 코드 응답이 올바르지 않습니다")

        prompter.device_code(str(verification_uri), str(user_code))

        interval = seconds_or_default(details.get("interval"), settings.DEVICE_POLL_INTERVAL_SECONDS)
        lifetime = seconds_or_default(details.get("expires_in"), DEFAULT_DEVICE_CODE_LIFETIME)
        return self._poll(http, profile, config, str(device_code), interval, lifetime)

    def _poll(
        self,
        http: requests.Session,
        profile: ConnectionProfile,
        config: OAuthConfig,
        device_code: str,
        interval: float,
        lifetime: float,
    ) -> SessionToken:
        deadline = self.clock() + lifetime
        data = {"grant_type": DEVICE_CODE_GRANT, "device_code": device_code, "client_id": config.client_id}

        while True:
            if self.clock() >= deadline:
                raise AuthenticationFailedError("디바이스 코드가 만료되었습니다")
            self.sleep(interval)

            response = self._request(http, profile, "POST", config.token_endpoint, data=data)
            if response.status_code < 400:
                return self._token(response)

            error_code = self._payload(response).get("error")
            if error_code == "authorization_pending":
                continue
            if error_code == "slow_down":
                interval += settings.DEVICE_SLOW_DOWN_SECONDS
                logger.debug("slow_down: 폴링 간격 %.0f초", interval)
                continue
            if is_auth_rejection(response.status_code, error_code):
                raise self._reject(response, "디바이스 인증이 거부되었습니다")
            raise self._reject(response, "디바이스 인증에 실패했습니다")

    def refresh(
        self,
        http: requests.Session,
        profile: ConnectionProfile,
        account: Account,
        token: SessionToken,
    ) -> SessionToken:
        if not token.refresh_token:
            return self.login(http, profile, account)

        config = self.discover(http, profile)
        logger.info("세션 토큰 갱신: %s", account.credential_ref)
        response = self._request(
            http,
            profile,
            "POST",
            config.token_endpoint,
            data={
                "grant_type": "refresh_token",
                "refresh_token": token.refresh_token,
                "client_id": config.client_id,
            },
        )
        if response.status_code >= 400:
            raise self._reject(response, "세션 갱신에 실패했습니다")

        refreshed = self._token(response)
        if refreshed.refresh_token is None:
            refreshed = SessionToken(
                access_token=refreshed.access_token,
                issued_at=refreshed.issued_at,
                expires_at=refreshed.expires_at,
                refresh_token=token.refresh_token,
                refresh_expires_at=token.refresh_expires_at,
            )
        return refreshed

    def _token(self, response: requests.Response) -> SessionToken:
        data = self._payload(response)
        access_token = data.get("access_token")
        if not access_token:
            raise AuthenticationFailedError("토큰 응답에 access_token이 없습니다", status=response.status_code)
        return build_session_token(
            str(access_token),
            self.now(),
            expires_in=data.get("expires_in"),
            refresh_token=data.get("refresh_token"),
            refresh_expires_in=data.get("refresh_expires_in"),
        )
