"""
logsh/registry/store.py - 레지스트리/자격 증명 파일 영속화

커넥션, 계정, 자격 증명을 하나의 JSON 파일(~/.logsh.json)에 저장합니다.
파일 위치는 LOGSH_CONFIG_PATH 환경 변수로 바꿀 수 있습니다.

동시성 보호:
    - 쓰기: ``filelock`` 으로 프로세스 간 배타적 잠금 + 임시 파일 쓰기 후 rename
      (쓰기 도중 중단되어도 기존 파일이 손상되지 않음)
    - 읽기: 잠금 없이 수행 (파일이 없으면 빈 레지스트리)
    - 여러 프로세스가 동시에 저장하면 마지막 저장이 이김 (last-writer-wins)

저장 형식은 키 정렬 + 들여쓰기 2로 고정되어,
변경 없이 load → save 하면 바이트 단위로 같은 파일이 됩니다.

사용법:
    from logsh.registry.store import RegistryStore

    store = RegistryStore()
    registry = store.load()
    registry.add("dev", "https://logship.example.com")
    store.save(registry)
"""

from __future__ import annotations

import json
import logging
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from logsh.auth.cache import CredentialStore
from logsh.auth.types import AuthMethod
from logsh.config import get_config_path, settings
from logsh.exceptions import ConfigError, InvalidEndpointError

from .models import REF_SEPARATOR, Account, ConnectionProfile, validate_endpoint
from .registry import Registry

logger = logging.getLogger(__name__)


# =============================================================================
# 직렬화
# =============================================================================


def registry_to_dict(registry: Registry, now: datetime | None = None) -> dict[str, Any]:
    """레지스트리를 저장용 딕셔너리로 변환"""
    default = registry.default_profile()
    return {
        "version": settings.CONFIG_SCHEMA_VERSION,
        "default_connection": default.name if default else None,
        "connections": {profile.name: profile.to_dict() for profile in registry.list()},
        "credentials": registry.credentials.to_dict(now),
    }


def registry_from_dict(data: dict[str, Any]) -> Registry:
    """저장된 딕셔너리에서 레지스트리 복원

    개별 커넥션/계정 파싱 실패 시 해당 항목만 건너뜁니다.
    알 수 없는 필드는 무시합니다.

    Raises:
        ValueError: 최상위 구조가 올바르지 않음
    """
    if not isinstance(data, dict):
        raise ValueError("최상위 값이 객체가 아닙니다")

    raw_connections = data.get("connections") or {}
    if not isinstance(raw_connections, dict):
        raise ValueError("connections 필드가 객체가 아닙니다")

    default_name = data.get("default_connection")
    profiles: list[ConnectionProfile] = []

    for name, raw in raw_connections.items():
        if not isinstance(raw, dict):
            logger.debug("커넥션 항목 로드 스킵: %s", name)
            continue
        if REF_SEPARATOR in name:
            logger.warning("커넥션 로드 스킵 (%s): 이름에 '%s' 포함", name, REF_SEPARATOR)
            continue
        try:
            profile = ConnectionProfile(
                name=name,
                endpoint=validate_endpoint(str(raw.get("endpoint", ""))),
                insecure_skip_verify=bool(raw.get("insecure_skip_verify", False)),
                is_default=name == default_name,
                added_at=str(raw.get("added_at") or ""),
            )
        except InvalidEndpointError as e:
            logger.warning("커넥션 로드 스킵 (%s): %s", name, e)
            continue

        default_account = raw.get("default_account")
        for account_id, raw_account in (raw.get("accounts") or {}).items():
            if not isinstance(raw_account, dict):
                continue
            if REF_SEPARATOR in account_id:
                logger.warning("계정 로드 스킵 (%s/%s): 계정 ID에 '%s' 포함", name, account_id, REF_SEPARATOR)
                continue
            try:
                method = AuthMethod(raw_account.get("auth_method"))
            except ValueError:
                logger.warning("계정 로드 스킵 (%s/%s): 알 수 없는 인증 방식", name, account_id)
                continue
            profile.accounts[account_id] = Account(
                account_id=account_id,
                label=str(raw_account.get("label") or account_id),
                auth_method=method,
                connection=name,
                username=raw_account.get("username"),
                is_default=account_id == default_account,
            )
        profiles.append(profile)

    if default_name and default_name not in raw_connections:
        logger.warning("기본 커넥션 '%s'이(가) 목록에 없어 무시합니다", default_name)

    raw_credentials = data.get("credentials") or {}
    if not isinstance(raw_credentials, dict):
        raw_credentials = {}
    known_refs = {account.credential_ref for profile in profiles for account in profile.accounts.values()}
    credentials = CredentialStore.from_dict({ref: value for ref, value in raw_credentials.items() if ref in known_refs})

    return Registry(profiles, credentials)


def dumps(registry: Registry, now: datetime | None = None) -> str:
    """결정적(deterministic) JSON 문자열"""
    return json.dumps(registry_to_dict(registry, now), ensure_ascii=False, indent=2, sort_keys=True) + "\n"


# =============================================================================
# 파일 저장소
# =============================================================================


class RegistryStore:
    """레지스트리 파일 로드/저장

    Attributes:
        path: 설정 파일 경로
        lock_timeout: 쓰기 잠금 대기 시간 (초)
    """

    def __init__(self, path: Path | str | None = None, lock_timeout: float | None = None):
        self.path = Path(path) if path is not None else get_config_path()
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.FILE_LOCK_TIMEOUT_SECONDS
        self._corrupt = False

    @property
    def lock_path(self) -> Path:
        return self.path.with_name(self.path.name + ".lock")

    def exists(self) -> bool:
        return self.path.exists()

    def load(self, strict: bool = False) -> Registry:
        """파일에서 레지스트리를 로드 (잠금 없이 읽기)

        파일이 없으면 빈 레지스트리를 반환합니다.

        Args:
            strict: True이면 손상된 파일에 대해 ConfigError를 발생시킴.
                False이면 경고를 남기고 빈 레지스트리로 취급

        Raises:
            ConfigError: strict=True이고 파일을 읽거나 해석할 수 없음
        """
        if not self.path.exists():
            logger.debug("설정 파일 없음, 빈 레지스트리 사용: %s", self.path)
            return Registry()

        try:
            text = self.path.read_text(encoding="utf-8")
            if not text.strip():
                return Registry()
            registry = registry_from_dict(json.loads(text))
        except (OSError, ValueError) as e:
            # json.JSONDecodeError는 ValueError의 하위 클래스
            if strict:
                raise ConfigError(str(self.path), "설정 파일을 읽을 수 없습니다", cause=e) from e
            logger.warning("설정 파일이 손상되어 빈 레지스트리로 취급합니다 (%s): %s", self.path, e)
            self._corrupt = True
            return Registry()

        logger.debug("설정 로드: %s (커넥션 %d개)", self.path, len(registry))
        return registry

    def save(self, registry: Registry) -> None:
        """레지스트리를 파일에 원자적으로 저장 (write-to-temp-then-rename)

        Raises:
            ConfigError: 잠금 획득 실패 또는 쓰기 실패
        """
        content = dumps(registry)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(str(self.lock_path), timeout=self.lock_timeout):
                if self._corrupt and self.path.exists():
                    backup = self.path.with_name(self.path.name + ".bak")
                    shutil.copy2(self.path, backup)
                    logger.warning("손상된 설정 파일을 백업했습니다: %s", backup)
                    self._corrupt = False
                self._write_atomic(content)
        except Timeout as e:
            raise ConfigError(str(self.path), "설정 파일 잠금을 획득하지 못했습니다", cause=e) from e
        except OSError as e:
            raise ConfigError(str(self.path), "설정 파일을 저장할 수 없습니다", cause=e) from e

        registry.dirty = False
        registry.credentials.dirty = False
        logger.debug("설정 저장: %s", self.path)

    def _write_atomic(self, content: str) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp", prefix=".logsh_")
        try:
            with open(fd, "w", encoding="utf-8") as f:
                f.write(content)
            Path(tmp_path).chmod(0o600)
            Path(tmp_path).replace(self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise


class Workspace:
    """명령 하나가 사용하는 상태 객체 (store + registry)

    프로세스 시작 시 한 번 로드되어 명령에 전달되며,
    변경이 있을 때만 저장됩니다.
    """

    def __init__(self, store: RegistryStore | None = None, registry: Registry | None = None):
        self.store = store or RegistryStore()
        self.registry = registry if registry is not None else self.store.load()

    @property
    def credentials(self) -> CredentialStore:
        return self.registry.credentials

    def save(self) -> None:
        self.store.save(self.registry)

    def save_if_dirty(self) -> bool:
        """변경이 있으면 저장

        Returns:
            True if 저장함
        """
        if not self.registry.needs_save:
            return False
        self.save()
        return True


# =============================================================================
# 모듈 수준 헬퍼
# =============================================================================


def load_registry(path: Path | str | None = None, strict: bool = False) -> Registry:
    """기본 위치(또는 지정 경로)에서 레지스트리 로드"""
    return RegistryStore(path).load(strict=strict)


def save_registry(registry: Registry, path: Path | str | None = None) -> None:
    """기본 위치(또는 지정 경로)에 레지스트리 저장"""
    RegistryStore(path).save(registry)
