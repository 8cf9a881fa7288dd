"""
logsh/auth/cache/cache.py - 자격 증명 저장소 구현

- ApiKeyCredential: 장기 API 키
- SessionToken: 단기 세션 토큰 (bearer + 발급/만료 시각 + refresh token)
- CredentialStore: 계정별 자격 증명 메모리 저장소 (레지스트리 파일과 함께 영속화)

설계 원칙:
- 계정당 유효한 자격 증명은 최대 하나 (put은 원자적 교체)
- 세션 토큰은 만료 30초 전부터 무효로 간주 (요청 도중 만료되는 경쟁 방지)
- 세션 토큰은 스스로 선언한 수명을 넘어 저장되지 않음 (직렬화 시 제외)
- API 키는 항상 "유효" - 실제 유효성은 요청 시 서버가 판단
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, Optional, Union

from logsh.config import settings

from ..types import NoCredentialError

logger = logging.getLogger(__name__)

# 직렬화 시 사용하는 시각 형식 (UTC)
TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# 만료 판단 버퍼
EXPIRY_SKEW = timedelta(seconds=settings.TOKEN_EXPIRY_SKEW_SECONDS)


def utcnow() -> datetime:
    """현재 UTC 시각 (tz-aware)"""
    return datetime.now(timezone.utc)


def format_time(value: datetime) -> str:
    """datetime을 저장 형식 문자열로 변환"""
    return value.astimezone(timezone.utc).strftime(TIME_FORMAT)


def parse_time(value: str) -> datetime:
    """저장 형식(또는 ISO 8601) 문자열을 UTC datetime으로 변환

    Raises:
        ValueError: 해석할 수 없는 형식
    """
    try:
        return datetime.strptime(value, TIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)


# =============================================================================
# Credential Types
# =============================================================================


@dataclass(frozen=True)
class ApiKeyCredential:
    """장기 API 키

    Attributes:
        api_key: API 키 원문
    """

    api_key: str

    kind = "api_key"

    @property
    def bearer(self) -> str:
        return self.api_key

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "api_key": self.api_key}

    def __repr__(self) -> str:
        return "ApiKeyCredential(api_key='***')"


@dataclass(frozen=True)
class SessionToken:
    """단기 세션 토큰

    Attributes:
        access_token: bearer 토큰 값
        issued_at: 발급 시각 (UTC)
        expires_at: 만료 시각 (UTC)
        refresh_token: 갱신 토큰 (옵션)
        refresh_expires_at: 갱신 토큰 만료 시각 (옵션, None이면 서버가 판단)
    """

    access_token: str
    issued_at: datetime
    expires_at: datetime
    refresh_token: Optional[str] = None
    refresh_expires_at: Optional[datetime] = None

    kind = "session_token"

    @property
    def bearer(self) -> str:
        return self.access_token

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        """만료까지 남은 초 (만료됐으면 0)"""
        now = now or utcnow()
        return max(0, int((self.expires_at - now).total_seconds()))

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환 (JSON 저장용)"""
        data: Dict[str, Any] = {
            "kind": self.kind,
            "access_token": self.access_token,
            "issued_at": format_time(self.issued_at),
            "expires_at": format_time(self.expires_at),
        }
        if self.refresh_token:
            data["refresh_token"] = self.refresh_token
        if self.refresh_expires_at:
            data["refresh_expires_at"] = format_time(self.refresh_expires_at)
        return data

    def __repr__(self) -> str:
        return (
            f"SessionToken(expires_at={format_time(self.expires_at)}, "
            f"refresh={'yes' if self.refresh_token else 'no'})"
        )


Credential = Union[ApiKeyCredential, SessionToken]


def credential_from_dict(data: Dict[str, Any]) -> Credential:
    """저장된 딕셔너리를 Credential로 복원

    Raises:
        ValueError: 알 수 없는 kind 또는 필수 필드 누락
    """
    kind = data.get("kind")
    if kind == ApiKeyCredential.kind:
        api_key = data.get("api_key")
        if not api_key:
            raise ValueError("api_key 필드가 비어 있습니다")
        return ApiKeyCredential(api_key=str(api_key))

    if kind == SessionToken.kind:
        try:
            refresh_expires = data.get("refresh_expires_at")
            return SessionToken(
                access_token=str(data["access_token"]),
                issued_at=parse_time(data["issued_at"]),
                expires_at=parse_time(data["expires_at"]),
                refresh_token=data.get("refresh_token") or None,
                refresh_expires_at=parse_time(refresh_expires) if refresh_expires else None,
            )
        except KeyError as e:
            raise ValueError(f"세션 토큰 필드 누락: {e}") from e

    raise ValueError(f"알 수 없는 자격 증명 종류: {kind!r}")


# =============================================================================
# Credential Store
# =============================================================================


class CredentialStore:
    """계정별 자격 증명 저장소

    키는 계정의 credential_ref ("{connection}/{account_id}") 입니다.
    레지스트리 파일과 함께 로드/저장되며, 변경 시 dirty 플래그를 세웁니다.

    Thread-safe 구현.
    """

    def __init__(self, credentials: Optional[Dict[str, Credential]] = None):
        self._credentials: Dict[str, Credential] = dict(credentials or {})
        self._lock = threading.RLock()
        self.dirty = False

    # -------------------------------------------------------------------------
    # 조회 / 변경
    # -------------------------------------------------------------------------

    def get(self, ref: str) -> Credential:
        """현재 자격 증명 조회

        Raises:
            NoCredentialError: 저장된 자격 증명이 없음
        """
        with self._lock:
            credential = self._credentials.get(ref)
        if credential is None:
            raise NoCredentialError(ref)
        return credential

    def find(self, ref: str) -> Optional[Credential]:
        """자격 증명 조회 (없으면 None)"""
        with self._lock:
            return self._credentials.get(ref)

    def put(self, ref: str, credential: Credential) -> None:
        """자격 증명을 원자적으로 교체"""
        with self._lock:
            self._credentials[ref] = credential
            self.dirty = True
        logger.debug("자격 증명 저장: %s (%s)", ref, credential.kind)

    def invalidate(self, ref: str) -> bool:
        """캐시된 세션 토큰을 폐기 (API 키는 유지)

        Returns:
            True if 세션 토큰이 삭제됨
        """
        with self._lock:
            credential = self._credentials.get(ref)
            if isinstance(credential, SessionToken):
                del self._credentials[ref]
                self.dirty = True
                logger.debug("세션 토큰 폐기: %s", ref)
                return True
            return False

    def remove(self, ref: str) -> bool:
        """종류와 관계없이 자격 증명 삭제

        Returns:
            True if 삭제됨
        """
        with self._lock:
            if ref in self._credentials:
                del self._credentials[ref]
                self.dirty = True
                return True
            return False

    def refs(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._credentials))

    def __contains__(self, ref: object) -> bool:
        with self._lock:
            return ref in self._credentials

    def __len__(self) -> int:
        with self._lock:
            return len(self._credentials)

    # -------------------------------------------------------------------------
    # 유효성
    # -------------------------------------------------------------------------

    @staticmethod
    def is_valid(credential: Credential, now: Optional[datetime] = None) -> bool:
        """자격 증명 유효성

        세션 토큰은 now < expires_at - 30초 일 때만 유효합니다.
        API 키는 항상 유효로 간주합니다.
        """
        if isinstance(credential, ApiKeyCredential):
            return True
        now = now or utcnow()
        return now < credential.expires_at - EXPIRY_SKEW

    @staticmethod
    def can_refresh(token: SessionToken, now: Optional[datetime] = None) -> bool:
        """refresh token이 있고 아직 만료되지 않았는지"""
        if not token.refresh_token:
            return False
        if token.refresh_expires_at is None:
            return True
        now = now or utcnow()
        return now < token.refresh_expires_at

    @classmethod
    def is_persistable(cls, credential: Credential, now: Optional[datetime] = None) -> bool:
        """파일에 기록해도 되는지 (선언된 수명 이내인지)"""
        if isinstance(credential, ApiKeyCredential):
            return True
        now = now or utcnow()
        return now < credential.expires_at or cls.can_refresh(credential, now)

    # -------------------------------------------------------------------------
    # 직렬화
    # -------------------------------------------------------------------------

    def to_dict(self, now: Optional[datetime] = None) -> Dict[str, Dict[str, Any]]:
        """저장용 딕셔너리 (수명이 지난 세션 토큰은 제외)"""
        now = now or utcnow()
        result: Dict[str, Dict[str, Any]] = {}
        with self._lock:
            for ref in sorted(self._credentials):
                credential = self._credentials[ref]
                if not self.is_persistable(credential, now):
                    logger.debug("만료된 세션 토큰은 저장하지 않음: %s", ref)
                    continue
                result[ref] = credential.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CredentialStore:
        """저장된 딕셔너리에서 복원

        개별 항목 파싱 실패 시 해당 항목만 건너뜁니다.
        """
        credentials: Dict[str, Credential] = {}
        for ref, raw in data.items():
            if not isinstance(raw, dict):
                continue
            try:
                credentials[ref] = credential_from_dict(raw)
            except ValueError as e:
                logger.warning("자격 증명 항목 로드 스킵 (%s): %s", ref, e)
        return cls(credentials)
