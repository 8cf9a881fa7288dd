"""
logsh/auth/provider/password.py - 사용자 이름/비밀번호 Provider

POST {endpoint}/auth/token {"username", "password"} 로 세션 토큰을 발급받고,
refresh token이 있으면 POST {endpoint}/auth/token/refresh 로 갱신합니다.
"""

from __future__ import annotations

import logging

import requests

from logsh.registry.models import Account, ConnectionProfile

from ..cache import SessionToken
from ..types import AuthenticationFailedError, AuthMethod
from .base import BaseProvider, build_session_token

logger = logging.getLogger(__name__)

TOKEN_PATH = "/auth/token"
REFRESH_PATH = "/auth/token/refresh"


class PasswordProvider(BaseProvider):
    """대화형 비밀번호 로그인"""

    method = AuthMethod.PASSWORD

    def login(
        self,
        http: requests.Session,
        profile: ConnectionProfile,
        account: Account,
    ) -> SessionToken:
        if not account.username:
            raise AuthenticationFailedError(f"계정 '{account.account_id}'에 사용자 이름이 없습니다")

        password = self._require_prompter().password(account.username, profile.name)
        if not password:
            raise AuthenticationFailedError("비밀번호가 비어 있습니다")

        logger.info("비밀번호 로그인: %s@%s", account.username, profile.name)
        response = self._request(
            http,
            profile,
            "POST",
            f"{profile.endpoint}{TOKEN_PATH}",
            json={"username": account.username, "password": password},
        )
        if response.status_code >= 400:
            raise self._reject(response, "로그인에 실패했습니다")
        return self._token(response)

    def refresh(
        self,
        http: requests.Session,
        profile: ConnectionProfile,
        account: Account,
        token: SessionToken,
    ) -> SessionToken:
        if not token.refresh_token:
            return self.login(http, profile, account)

        logger.info("세션 토큰 갱신: %s", account.credential_ref)
        response = self._request(
            http,
            profile,
            "POST",
            f"{profile.endpoint}{REFRESH_PATH}",
            json={"refreshToken": token.refresh_token},
        )
        if response.status_code >= 400:
            raise self._reject(response, "세션 갱신에 실패했습니다")

        refreshed = self._token(response)
        if refreshed.refresh_token is None:
            # 새 refresh token을 주지 않으면 기존 것을 계속 사용
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
        access_token = data.get("token")
        if not access_token:
            raise AuthenticationFailedError("인증 응답에 토큰이 없습니다", status=response.status_code)
        return build_session_token(
            str(access_token),
            self.now(),
            expires_in=data.get("expiresIn"),
            expires_at=data.get("expiresAt"),
            refresh_token=data.get("refreshToken"),
            refresh_expires_in=data.get("refreshExpiresIn"),
        )
