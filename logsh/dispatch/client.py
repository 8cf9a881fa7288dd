"""
logsh/dispatch/client.py - requests Session 생성 헬퍼

기본 헤더(User-Agent, x-ls-hostname)와 연결 풀이 설정된
requests.Session을 생성합니다. 인증 교환과 API 요청 모두 이 세션을 사용합니다.

Example:
    from logsh.dispatch.client import build_http_session

    http = build_http_session()
    response = http.get(url, timeout=request_timeout(30))
"""

from __future__ import annotations

import socket

import requests
from requests.adapters import HTTPAdapter

from logsh.config import get_user_agent, settings

# 기본 연결 풀 크기 (CLI는 명령당 요청 하나)
DEFAULT_POOL_CONNECTIONS = 4


def get_hostname() -> str:
    """x-ls-hostname 헤더 값 (조회 실패 시 빈 문자열)"""
    try:
        return socket.gethostname()
    except OSError:
        return ""


def build_http_session(
    user_agent: str | None = None,
    hostname: str | None = None,
    pool_connections: int = DEFAULT_POOL_CONNECTIONS,
) -> requests.Session:
    """기본 헤더가 적용된 requests.Session 생성

    Args:
        user_agent: User-Agent (None이면 logsh/<version>)
        hostname: x-ls-hostname 값 (None이면 현재 호스트 이름)
        pool_connections: HTTP 연결 풀 크기

    Returns:
        requests.Session
    """
    session = requests.Session()
    session.headers["User-Agent"] = user_agent or get_user_agent()
    session.headers[settings.HOSTNAME_HEADER] = hostname if hostname is not None else get_hostname()

    # urllib3 자체 재시도는 끄고 RetryPolicy가 담당
    adapter = HTTPAdapter(pool_connections=pool_connections, pool_maxsize=pool_connections, max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def request_timeout(read_timeout: float) -> tuple[float, float]:
    """requests용 (connect, read) 타임아웃 튜플"""
    return (min(settings.CONNECT_TIMEOUT_SECONDS, read_timeout), read_timeout)
