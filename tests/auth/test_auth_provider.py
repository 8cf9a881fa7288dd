# tests/auth/test_auth_provider.py
"""
logsh/auth/provider 단위 테스트

비밀번호 / 디바이스 코드 / API 키 Provider와 토큰 응답 해석 테스트.
"""

import base64
import json
from datetime import timedelta

import pytest
import requests

from logsh.auth.cache import ApiKeyCredential, SessionToken
from logsh.auth.provider import STRATEGIES, create_provider
from logsh.auth.provider.api_key import ApiKeyProvider
from logsh.auth.provider.base import build_session_token, is_auth_rejection, jwt_expiry
from logsh.auth.provider.device import DEVICE_CODE_GRANT, DeviceFlowProvider
from logsh.auth.provider.password import PasswordProvider
from logsh.auth.types import AuthenticationFailedError, AuthMethod, ConnectionUnavailableError


def make_jwt(claims: dict) -> str:
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip("=")
    return f"eyJhbGciOiJub25lIn0.{payload}.sig"


# =============================================================================
# 토큰 응답 해석
# =============================================================================


class TestBuildSessionToken:
    """build_session_token 테스트"""

    def test_expires_in(self, now):
        token = build_session_token("t", now, expires_in=120)
        assert token.expires_at == now + timedelta(seconds=120)
        assert token.issued_at == now

    def test_expires_at_wins(self, now):
        token = build_session_token("t", now, expires_in=120, expires_at="2026-01-01T05:00:00Z")
        assert token.expires_at == now + timedelta(hours=5)

    def test_jwt_exp(self, now):
        exp = now + timedelta(minutes=10)
        token = build_session_token(make_jwt({"exp": exp.timestamp()}), now)
        assert token.expires_at == exp

    def test_default_lifetime(self, now):
        token = build_session_token("opaque", now)
        assert token.expires_at == now + timedelta(seconds=3600)

    def test_refresh_expiry(self, now):
        token = build_session_token("t", now, expires_in=60, refresh_token="r", refresh_expires_in=600)
        assert token.refresh_token == "r"
        assert token.refresh_expires_at == now + timedelta(seconds=600)

    def test_jwt_expiry_invalid(self):
        assert jwt_expiry("a.b") is None
        assert jwt_expiry("a.!!!.c") is None
        assert jwt_expiry(make_jwt({"sub": "x"})) is None

    def test_is_auth_rejection(self):
        assert is_auth_rejection(401) is True
        assert is_auth_rejection(400, "authorization_pending") is True
        assert is_auth_rejection(418, "expired_token") is True
        assert is_auth_rejection(418) is False


# =============================================================================
# 비밀번호
# =============================================================================


class TestPasswordProvider:
    """PasswordProvider 테스트"""

    @pytest.fixture
    def target(self, registry):
        profile = registry.get("prod")
        return profile, profile.accounts["acc-1"]

    def test_login(self, target, mock_http, make_response, prompter, now, calls):
        profile, account = target
        mock_http.request.return_value = make_response(200, {"token": "tok", "expiresIn": 600, "refreshToken": "r"})

        token = PasswordProvider(prompter=prompter, now=lambda: now).login(mock_http, profile, account)

        assert token.access_token == "tok"
        assert token.expires_at == now + timedelta(seconds=600)
        assert token.refresh_token == "r"
        assert prompter.password_calls == [("alice", "prod")]
        method, url, kwargs = calls(mock_http)[0]
        assert (method, url) == ("POST", "https://prod.example.com/auth/token")
        assert kwargs["json"] == {"username": "alice", "password": "secret"}
        assert kwargs["verify"] is True

    def test_rejected(self, target, mock_http, make_response, prompter):
        mock_http.request.return_value = make_response(401, {"message": "bad password"})

        with pytest.raises(AuthenticationFailedError) as exc_info:
            PasswordProvider(prompter=prompter).login(mock_http, *target)

        assert exc_info.value.status == 401
        assert "bad password" in str(exc_info.value)

    def test_transport_failure(self, target, mock_http, prompter):
        mock_http.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ConnectionUnavailableError) as exc_info:
            PasswordProvider(prompter=prompter).login(mock_http, *target)

        assert exc_info.value.endpoint == "https://prod.example.com"

    def test_server_error_is_unavailable(self, target, mock_http, make_response, prompter):
        mock_http.request.return_value = make_response(503, text="down")
        with pytest.raises(ConnectionUnavailableError):
            PasswordProvider(prompter=prompter).login(mock_http, *target)

    def test_missing_token_field(self, target, mock_http, make_response, prompter):
        mock_http.request.return_value = make_response(200, {"expiresIn": 60})
        with pytest.raises(AuthenticationFailedError):
            PasswordProvider(prompter=prompter).login(mock_http, *target)

    def test_no_prompter(self, target, mock_http):
        with pytest.raises(AuthenticationFailedError):
            PasswordProvider().login(mock_http, *target)
        mock_http.request.assert_not_called()

    def test_refresh_keeps_refresh_token(self, target, mock_http, make_response, now, calls):
        profile, account = target
        old = SessionToken("old", now - timedelta(hours=1), now - timedelta(minutes=1), refresh_token="r1")
        mock_http.request.return_value = make_response(200, {"token": "new", "expiresIn": 60})

        token = PasswordProvider(now=lambda: now).refresh(mock_http, profile, account, old)

        assert token.access_token == "new"
        assert token.refresh_token == "r1"
        method, url, kwargs = calls(mock_http)[0]
        assert url == "https://prod.example.com/auth/token/refresh"
        assert kwargs["json"] == {"refreshToken": "r1"}

    def test_insecure_connection_disables_verify(self, registry, mock_http, make_response, prompter, calls):
        registry.add("lab", "https://lab.local", insecure_skip_verify=True)
        account = registry.add_account("lab", "acc", None, AuthMethod.PASSWORD, username="alice")
        mock_http.request.return_value = make_response(200, {"token": "t"})

        PasswordProvider(prompter=prompter).login(mock_http, registry.get("lab"), account)

        assert calls(mock_http)[0][2]["verify"] is False


# =============================================================================
# 디바이스 코드 플로우
# =============================================================================


OAUTH_CONFIG = {
    "clientId": "logsh-cli",
    "authorizeEndpoint": "https://idp.example.com/authorize",
    "tokenEndpoint": "https://idp.example.com/token",
    "deviceEndpoint": "https://idp.example.com/device",
    "scopes": ["openid", "offline_access"],
}

DEVICE_RESPONSE = {
    "device_code": "dev-code",
    "user_code": "ABCD-EFGH",
    "verification_uri": "https://idp.example.com/activate",
    "interval": 5,
    "expires_in": 600,
}


class TestDeviceFlowProvider:
    """DeviceFlowProvider 테스트"""

    @pytest.fixture
    def target(self, registry):
        registry.add_account("prod", "acc-3", "sso", AuthMethod.DEVICE_FLOW)
        profile = registry.get("prod")
        return profile, profile.accounts["acc-3"]

    def test_polling_with_slow_down(self, target, mock_http, make_response, prompter, now, calls):
        """authorization_pending → slow_down(간격 +5초) → 성공"""
        mock_http.request.side_effect = [
            make_response(200, OAUTH_CONFIG),
            make_response(200, DEVICE_RESPONSE),
            make_response(400, {"error": "authorization_pending"}),
            make_response(400, {"error": "slow_down"}),
            make_response(200, {"access_token": "at", "expires_in": 900, "refresh_token": "rt"}),
        ]
        sleeps = []
        provider = DeviceFlowProvider(prompter=prompter, now=lambda: now, sleep=sleeps.append, clock=lambda: 0.0)

        token = provider.login(mock_http, *target)

        assert token.access_token == "at"
        assert token.expires_at == now + timedelta(seconds=900)
        assert sleeps == [5.0, 5.0, 10.0]
        assert prompter.device_codes == [("https://idp.example.com/activate", "ABCD-EFGH")]

        recorded = calls(mock_http)
        assert recorded[0][:2] == ("GET", "https://prod.example.com/auth/oauth")
        assert recorded[1][2]["data"] == {"client_id": "logsh-cli", "scope": "openid offline_access"}
        assert recorded[2][2]["data"] == {
            "grant_type": DEVICE_CODE_GRANT,
            "device_code": "dev-code",
            "client_id": "logsh-cli",
        }

    def test_access_denied(self, target, mock_http, make_response, prompter):
        mock_http.request.side_effect = [
            make_response(200, OAUTH_CONFIG),
            make_response(200, DEVICE_RESPONSE),
            make_response(400, {"error": "access_denied"}),
        ]
        provider = DeviceFlowProvider(prompter=prompter, sleep=lambda s: None, clock=lambda: 0.0)

        with pytest.raises(AuthenticationFailedError) as exc_info:
            provider.login(mock_http, *target)
        assert "access_denied" in str(exc_info.value)

    def test_device_code_expires(self, target, mock_http, make_response, prompter):
        mock_http.request.side_effect = [
            make_response(200, OAUTH_CONFIG),
            make_response(200, DEVICE_RESPONSE),
            make_response(400, {"error": "authorization_pending"}),
        ]
        ticks = iter([0.0, 0.0, 700.0])
        provider = DeviceFlowProvider(prompter=prompter, sleep=lambda s: None, clock=lambda: next(ticks))

        with pytest.raises(AuthenticationFailedError):
            provider.login(mock_http, *target)
        assert mock_http.request.call_count == 3

    def test_non_numeric_interval_uses_defaults(self, target, mock_http, make_response, prompter):
        """interval/expires_in이 숫자가 아니면 기본 간격(5초)과 기본 수명(600초)으로 폴링"""
        mock_http.request.side_effect = [
            make_response(200, OAUTH_CONFIG),
            make_response(200, {**DEVICE_RESPONSE, "interval": "soon", "expires_in": "never"}),
            make_response(400, {"error": "authorization_pending"}),
            make_response(200, {"access_token": "at", "expires_in": 900}),
        ]
        sleeps = []
        ticks = iter([0.0, 0.0, 599.0])
        provider = DeviceFlowProvider(prompter=prompter, sleep=sleeps.append, clock=lambda: next(ticks))

        token = provider.login(mock_http, *target)

        assert token.access_token == "at"
        assert sleeps == [5.0, 5.0]

    def test_oauth_not_configured(self, target, mock_http, make_response, prompter):
        mock_http.request.return_value = make_response(204)
        with pytest.raises(AuthenticationFailedError):
            DeviceFlowProvider(prompter=prompter).login(mock_http, *target)

    def test_refresh(self, target, mock_http, make_response, now, calls):
        old = SessionToken("old", now - timedelta(hours=1), now - timedelta(minutes=1), refresh_token="rt")
        mock_http.request.side_effect = [
            make_response(200, OAUTH_CONFIG),
            make_response(200, {"access_token": "new", "expires_in": 60}),
        ]

        token = DeviceFlowProvider(now=lambda: now).refresh(mock_http, *target, old)

        assert token.access_token == "new"
        assert token.refresh_token == "rt"
        assert calls(mock_http)[1][2]["data"]["grant_type"] == "refresh_token"


# =============================================================================
# API 키 / 전략 선택
# =============================================================================


class TestApiKeyProvider:
    def test_login_without_key_fails(self, registry, mock_http):
        profile = registry.get("prod")
        with pytest.raises(AuthenticationFailedError):
            ApiKeyProvider().login(mock_http, profile, profile.accounts["acc-2"])
        mock_http.request.assert_not_called()

    def test_credential(self):
        assert ApiKeyProvider.credential("  key  ") == ApiKeyCredential("key")
        with pytest.raises(AuthenticationFailedError):
            ApiKeyProvider.credential("   ")


class TestStrategies:
    def test_every_method_has_provider(self):
        assert set(STRATEGIES) == set(AuthMethod)

    def test_create_provider(self, prompter):
        provider = create_provider(AuthMethod.DEVICE_FLOW, prompter=prompter)
        assert isinstance(provider, DeviceFlowProvider)
        assert provider.prompter is prompter

    @pytest.mark.parametrize(
        "method, expected",
        [(AuthMethod.PASSWORD, True), (AuthMethod.DEVICE_FLOW, True), (AuthMethod.API_KEY, False)],
    )
    def test_uses_session_token(self, method, expected):
        assert method.uses_session_token is expected
