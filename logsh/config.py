"""
logsh/config.py - 중앙 설정 관리

CLI 전체에서 사용하는 기본값, 환경 변수 이름, 경로 계산을 한 곳에 모읍니다.
설정값은 불변(frozen) 데이터클래스로 관리하며, 환경 변수로 덮어쓸 수 있는 값은
헬퍼 함수(get_env_int 등)를 통해 읽습니다.

Usage:
    from logsh.config import settings, get_config_path

    timeout = get_query_timeout()       # 30.0 또는 LOGSH_QUERY_TIMEOUT
    path = get_config_path()            # ~/.logsh.json 또는 LOGSH_CONFIG_PATH
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# =============================================================================
# 환경 변수 이름
# =============================================================================

ENV_CONFIG_PATH = "LOGSH_CONFIG_PATH"
ENV_CONNECTION = "LOGSH_CONNECTION"
ENV_ACCOUNT = "LOGSH_ACCOUNT"
ENV_QUERY_TIMEOUT = "LOGSH_QUERY_TIMEOUT"
ENV_UPLOAD_TIMEOUT = "LOGSH_UPLOAD_TIMEOUT"
ENV_MAX_ATTEMPTS = "LOGSH_MAX_ATTEMPTS"
ENV_LANG = "LOGSH_LANG"
ENV_LOG_LEVEL = "LOGSH_LOG_LEVEL"
ENV_LOG_FORMAT = "LOGSH_LOG_FORMAT"

VERSION = "0.3.0"


@dataclass(frozen=True)
class Settings:
    """애플리케이션 기본 설정 (불변)"""

    # 설정 파일
    CONFIG_FILENAME: str = ".logsh.json"
    CONFIG_SCHEMA_VERSION: int = 1
    FILE_LOCK_TIMEOUT_SECONDS: float = 10.0

    # HTTP 타임아웃 (초)
    CONNECT_TIMEOUT_SECONDS: float = 10.0
    QUERY_TIMEOUT_SECONDS: float = 30.0
    UPLOAD_TIMEOUT_SECONDS: float = 300.0
    AUTH_TIMEOUT_SECONDS: float = 30.0

    # 재시도 (멱등 요청 전용)
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_BASE_DELAY: float = 0.5
    RETRY_MAX_DELAY: float = 8.0
    RETRY_EXPONENTIAL_BASE: float = 2.0

    # 토큰 수명
    TOKEN_EXPIRY_SKEW_SECONDS: int = 30
    DEFAULT_TOKEN_LIFETIME_SECONDS: int = 3600

    # 디바이스 플로우 폴링
    DEVICE_POLL_INTERVAL_SECONDS: int = 5
    DEVICE_SLOW_DOWN_SECONDS: int = 5

    # 헤더
    HOSTNAME_HEADER: str = "x-ls-hostname"


settings = Settings()


# =============================================================================
# 환경 변수 헬퍼
# =============================================================================


def get_env_bool(name: str, default: bool = False) -> bool:
    """환경 변수를 bool로 읽습니다. 해석할 수 없으면 default."""
    value = os.environ.get(name)
    if value is None:
        return default

    value = value.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def get_env_int(name: str, default: int) -> int:
    """환경 변수를 int로 읽습니다. 해석할 수 없으면 default."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("환경 변수 %s 값이 정수가 아닙니다: %r", name, value)
        return default


def get_env_float(name: str, default: float) -> float:
    """환경 변수를 float로 읽습니다. 해석할 수 없거나 0 이하이면 default."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError:
        logger.warning("환경 변수 %s 값이 숫자가 아닙니다: %r", name, value)
        return default
    return parsed if parsed > 0 else default


def get_env_str(name: str) -> str | None:
    """비어 있지 않은 환경 변수 값을 반환합니다 (공백만 있으면 None)."""
    value = os.environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


# =============================================================================
# 경로 / 버전
# =============================================================================


def get_config_path() -> Path:
    """설정(레지스트리) 파일 경로

    LOGSH_CONFIG_PATH가 있으면 그 경로를, 없으면 ~/.logsh.json을 사용합니다.
    """
    override = get_env_str(ENV_CONFIG_PATH)
    if override:
        return Path(override).expanduser()
    return Path.home() / settings.CONFIG_FILENAME


def get_version() -> str:
    """CLI 버전 문자열"""
    return VERSION


def get_user_agent() -> str:
    return f"logsh/{get_version()}"


def get_query_timeout() -> float:
    return get_env_float(ENV_QUERY_TIMEOUT, settings.QUERY_TIMEOUT_SECONDS)


def get_upload_timeout() -> float:
    return get_env_float(ENV_UPLOAD_TIMEOUT, settings.UPLOAD_TIMEOUT_SECONDS)


def get_max_attempts() -> int:
    attempts = get_env_int(ENV_MAX_ATTEMPTS, settings.RETRY_MAX_ATTEMPTS)
    return attempts if attempts >= 1 else settings.RETRY_MAX_ATTEMPTS


# =============================================================================
# 로깅 설정
# =============================================================================


@dataclass
class LogConfig:
    """로깅 설정

    Attributes:
        level: 로그 레벨 이름 (DEBUG, INFO, WARNING, ...)
        format: logging 포맷 문자열
        date_format: 날짜 포맷
    """

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def from_env(cls) -> LogConfig:
        """LOGSH_LOG_LEVEL / LOGSH_LOG_FORMAT 환경 변수에서 로드"""
        config = cls()
        level = get_env_str(ENV_LOG_LEVEL)
        if level:
            config.level = level.upper()
        fmt = get_env_str(ENV_LOG_FORMAT)
        if fmt:
            config.format = fmt
        return config

    @staticmethod
    def level_for_verbosity(verbose: int) -> str:
        """-v 반복 횟수를 로그 레벨로 변환 (0: WARNING, 1: INFO, 2+: DEBUG)"""
        if verbose <= 0:
            return "WARNING"
        if verbose == 1:
            return "INFO"
        return "DEBUG"
