"""
tests/conftest.py - pytest 공통 픽스처

HTTP 모킹(requests.Session), 고정 시각, 테스트용 레지스트리를 제공합니다.

Usage:
    def test_something(registry, mock_http, make_response):
        mock_http.request.return_value = make_response(200, {"userId": "u1"})
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from logsh.auth.types import AuthMethod, Prompter  # noqa: E402
from logsh.registry.registry import Registry  # noqa: E402

# 테스트 기준 시각
NOW = datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment(tmp_path, monkeypatch):
    """테스트 환경 설정

    설정 파일은 항상 임시 디렉토리를 사용하고,
    활성 컨텍스트/로그 관련 환경 변수는 비웁니다.
    """
    monkeypatch.setenv("LOGSH_CONFIG_PATH", str(tmp_path / ".logsh.json"))
    for name in (
        "LOGSH_CONNECTION",
        "LOGSH_ACCOUNT",
        "LOGSH_LANG",
        "LOGSH_LOG_LEVEL",
        "LOGSH_LOG_FORMAT",
        "LOGSH_MAX_ATTEMPTS",
        "LOGSH_QUERY_TIMEOUT",
        "LOGSH_UPLOAD_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def config_path(tmp_path) -> Path:
    """LOGSH_CONFIG_PATH가 가리키는 설정 파일 경로"""
    return tmp_path / ".logsh.json"


@pytest.fixture
def now() -> datetime:
    return NOW


# =============================================================================
# HTTP 모킹
# =============================================================================


def _response(
    status: int = 200,
    body: Any = None,
    text: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.headers = dict(headers or {})

    if body is not None:
        payload = json.dumps(body)
        response.headers.setdefault("Content-Type", "application/json")
        response.content = payload.encode("utf-8")
        response.text = payload
        response.json.return_value = body
    else:
        response.content = (text or "").encode("utf-8")
        response.text = text or ""
        response.json.side_effect = ValueError("not json")
    return response


@pytest.fixture
def make_response():
    """requests.Response 모킹 팩토리

    make_response(200, {"token": "..."})  # JSON 응답
    make_response(503, text="unavailable") # 텍스트 응답
    """
    return _response


@pytest.fixture
def mock_http() -> MagicMock:
    """requests.Session 모킹 (request 호출만 사용)"""
    return MagicMock()


def request_calls(mock_http: MagicMock) -> List[Tuple[str, str, Dict[str, Any]]]:
    """mock_http.request 호출 목록을 (method, url, kwargs)로 변환"""
    return [(c.args[0], c.args[1], c.kwargs) for c in mock_http.request.call_args_list]


@pytest.fixture
def calls():
    return request_calls


# =============================================================================
# 입력 모킹
# =============================================================================


class FakePrompter(Prompter):
    """고정 비밀번호를 반환하고 디바이스 코드 안내를 기록하는 Prompter"""

    def __init__(self, password: str = "secret"):
        self._password = password
        self.password_calls: List[Tuple[str, str]] = []
        self.device_codes: List[Tuple[str, str]] = []

    def password(self, username: str, connection: str) -> str:
        self.password_calls.append((username, connection))
        return self._password

    def device_code(self, verification_uri: str, user_code: str) -> None:
        self.device_codes.append((verification_uri, user_code))


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


# =============================================================================
# 레지스트리
# =============================================================================


@pytest.fixture
def registry() -> Registry:
    """prod(기본)/dev 커넥션과 계정이 등록된 레지스트리

    prod: acc-1 (ops, 비밀번호, 기본), acc-2 (bot, API 키)
    dev:  acc-9 (dev, 비밀번호, 기본)
    """
    reg = Registry()
    reg.add("prod", "https://prod.example.com")
    reg.add("dev", "https://dev.example.com/")
    reg.add_account("prod", "acc-1", "ops", AuthMethod.PASSWORD, username="alice")
    reg.add_account("prod", "acc-2", "bot", AuthMethod.API_KEY)
    reg.add_account("dev", "acc-9", "dev", AuthMethod.PASSWORD, username="bob")
    reg.dirty = False
    return reg
