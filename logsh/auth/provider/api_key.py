"""
logsh/auth/provider/api_key.py - API 키 Provider

API 키는 교환 없이 그대로 Authorization: Bearer 헤더로 사용됩니다.
키는 `logsh account add --auth api-key`로 등록하며, 저장된 키가 없을 때
세션을 "로그인"으로 만들어낼 수는 없습니다.
"""

from __future__ import annotations

import requests

from logsh.registry.models import Account, ConnectionProfile

from ..cache import ApiKeyCredential, SessionToken
from ..types import AuthenticationFailedError, AuthMethod
from .base import BaseProvider


class ApiKeyProvider(BaseProvider):
    """장기 API 키"""

    method = AuthMethod.API_KEY

    def login(
        self,
        http: requests.Session,
        profile: ConnectionProfile,
        account: Account,
    ) -> SessionToken:
        raise AuthenticationFailedError(
            f"계정 '{account.account_id}'에 등록된 API 키가 없습니다 (logsh account add --auth api-key)"
        )

    @staticmethod
    def credential(api_key: str) -> ApiKeyCredential:
        """입력된 API 키로 자격 증명 생성

        Raises:
            AuthenticationFailedError: 빈 키
        """
        api_key = (api_key or "").strip()
        if not api_key:
            raise AuthenticationFailedError("API 키가 비어 있습니다")
        return ApiKeyCredential(api_key=api_key)
