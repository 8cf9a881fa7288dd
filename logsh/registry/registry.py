"""
logsh/registry/registry.py - 커넥션 레지스트리

이름이 붙은 서버 엔드포인트(ConnectionProfile)와 그 계정(Account)을 관리합니다.
모든 변경은 dirty 플래그를 세우며, 실제 저장은 RegistryStore가 담당합니다.

불변 조건:
    - 커넥션 이름은 고유
    - 기본 커넥션은 최대 하나
    - 커넥션마다 기본 계정은 최대 하나
    - 커넥션/계정 삭제 시 소유한 자격 증명도 함께 삭제
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime

from logsh.auth.cache import CredentialStore
from logsh.auth.types import AuthMethod
from logsh.exceptions import DuplicateNameError, NotFoundError, ValidationError

from .models import REF_SEPARATOR, Account, ConnectionProfile, validate_endpoint

logger = logging.getLogger(__name__)

KIND_CONNECTION = "커넥션"
KIND_ACCOUNT = "계정"


def normalize_name(value: str | None) -> str:
    """조회/저장에 사용하는 이름 (앞뒤 공백 제거)"""
    return (value or "").strip()


def validate_name(field_name: str, value: str | None, empty_message: str) -> str:
    """커넥션 이름 / 계정 ID 검증

    자격 증명 키가 '{커넥션}/{계정 ID}'이므로 구분자 '/'는 허용하지 않습니다.

    Raises:
        ValidationError: 빈 값 또는 구분자 포함
    """
    name = normalize_name(value)
    if not name:
        raise ValidationError(field_name, empty_message)
    if REF_SEPARATOR in name:
        raise ValidationError(field_name, f"'{REF_SEPARATOR}' 문자는 사용할 수 없습니다: {name}")
    return name


class ProfileListing:
    """이름 오름차순 커넥션 목록 (지연 평가, 반복 가능)

    iter()를 호출할 때마다 레지스트리의 현재 상태로 새로 순회합니다.
    """

    def __init__(self, registry: Registry):
        self._registry = registry

    def __iter__(self) -> Iterator[ConnectionProfile]:
        for name in sorted(self._registry._profiles):
            yield self._registry._profiles[name]

    def __len__(self) -> int:
        return len(self._registry._profiles)


class Registry:
    """커넥션 레지스트리

    Attributes:
        credentials: 계정 자격 증명 저장소 (삭제 시 연쇄 정리)
        dirty: 저장이 필요한 변경이 있는지
    """

    def __init__(
        self,
        profiles: Iterable[ConnectionProfile] | None = None,
        credentials: CredentialStore | None = None,
    ):
        self._profiles: dict[str, ConnectionProfile] = {}
        for profile in profiles or []:
            self._profiles[profile.name] = profile
        self.credentials = credentials if credentials is not None else CredentialStore()
        self.dirty = False

    # =========================================================================
    # 커넥션
    # =========================================================================

    def add(
        self,
        name: str,
        endpoint: str,
        insecure_skip_verify: bool = False,
        make_default: bool = False,
    ) -> ConnectionProfile:
        """커넥션 추가

        첫 번째 커넥션은 자동으로 기본 커넥션이 됩니다.

        Raises:
            ValidationError: 이름이 비어 있거나 '/' 포함
            DuplicateNameError: 같은 이름이 이미 있음
            InvalidEndpointError: URL 파싱 실패 또는 scheme 누락
        """
        name = validate_name("name", name, "커넥션 이름이 비어 있습니다")
        if name in self._profiles:
            raise DuplicateNameError(KIND_CONNECTION, name)

        normalized = validate_endpoint(endpoint)
        profile = ConnectionProfile(
            name=name,
            endpoint=normalized,
            insecure_skip_verify=insecure_skip_verify,
            added_at=datetime.now().replace(microsecond=0).isoformat(),
        )
        first = not self._profiles
        self._profiles[name] = profile
        self.dirty = True
        logger.info("커넥션 추가: %s (%s)", name, normalized)

        if make_default or first:
            self._flip_default(name)
            if first and not make_default:
                logger.info("첫 번째 커넥션을 기본값으로 설정: %s", name)
        return profile

    def remove(self, name: str) -> ConnectionProfile:
        """커넥션 삭제 (소유 계정과 자격 증명 포함)

        기본 커넥션을 삭제해도 다른 커넥션을 기본값으로 승격하지 않습니다.

        Raises:
            NotFoundError: 커넥션이 없음
        """
        profile = self.get(name)
        del self._profiles[profile.name]
        removed = sum(self.credentials.remove(account.credential_ref) for account in profile.accounts.values())
        self.dirty = True
        logger.info("커넥션 삭제: %s (계정 %d개, 자격 증명 %d개)", profile.name, len(profile.accounts), removed)
        return profile

    def list(self) -> ProfileListing:
        """이름 오름차순 커넥션 목록"""
        return ProfileListing(self)

    def get(self, name: str) -> ConnectionProfile:
        """이름으로 커넥션 조회

        Raises:
            NotFoundError: 커넥션이 없음
        """
        profile = self._profiles.get(normalize_name(name))
        if profile is None:
            raise NotFoundError(KIND_CONNECTION, name)
        return profile

    def find(self, name: str) -> ConnectionProfile | None:
        return self._profiles.get(normalize_name(name))

    def set_default(self, name: str) -> ConnectionProfile:
        """기본 커넥션 변경

        Raises:
            NotFoundError: 커넥션이 없음 (기존 기본값은 그대로 유지)
        """
        profile = self.get(name)
        self._flip_default(profile.name)
        return profile

    def default_profile(self) -> ConnectionProfile | None:
        for profile in self._profiles.values():
            if profile.is_default:
                return profile
        return None

    @property
    def needs_save(self) -> bool:
        """레지스트리 또는 자격 증명에 저장되지 않은 변경이 있는지"""
        return self.dirty or self.credentials.dirty

    def is_empty(self) -> bool:
        return not self._profiles

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def _flip_default(self, name: str) -> None:
        for profile_name, profile in self._profiles.items():
            profile.is_default = profile_name == name
        self.dirty = True
        logger.debug("기본 커넥션: %s", name)

    # =========================================================================
    # 계정
    # =========================================================================

    def add_account(
        self,
        connection: str,
        account_id: str,
        label: str | None,
        auth_method: AuthMethod,
        username: str | None = None,
        make_default: bool = False,
    ) -> Account:
        """계정 추가

        커넥션의 첫 번째 계정은 자동으로 기본 계정이 됩니다.

        Raises:
            NotFoundError: 커넥션이 없음
            ValidationError: 계정 ID가 비어 있거나 '/' 포함, 비밀번호 계정에 사용자 이름 누락
            DuplicateNameError: 계정 ID 또는 라벨 중복
        """
        profile = self.get(connection)
        account_id = validate_name("account_id", account_id, "계정 ID가 비어 있습니다")
        label = (label or "").strip() or account_id
        if auth_method is AuthMethod.PASSWORD and not username:
            raise ValidationError("username", "비밀번호 인증에는 사용자 이름이 필요합니다")

        if account_id in profile.accounts:
            raise DuplicateNameError(KIND_ACCOUNT, account_id)
        for existing in profile.accounts.values():
            if existing.label == label or existing.account_id == label:
                raise DuplicateNameError(KIND_ACCOUNT, label)

        account = Account(
            account_id=account_id,
            label=label,
            auth_method=auth_method,
            connection=profile.name,
            username=username,
        )
        first = not profile.accounts
        profile.accounts[account_id] = account
        self.dirty = True
        logger.info("계정 추가: %s/%s (%s)", profile.name, account_id, auth_method)

        if make_default or first:
            self._flip_default_account(profile, account_id)
        return account

    def remove_account(self, connection: str, ref: str) -> Account:
        """계정 삭제 (자격 증명 포함)

        Raises:
            NotFoundError: 커넥션 또는 계정이 없음
        """
        profile = self.get(connection)
        account = self.get_account(connection, ref)
        del profile.accounts[account.account_id]
        self.credentials.remove(account.credential_ref)
        self.dirty = True
        logger.info("계정 삭제: %s", account.credential_ref)
        return account

    def get_account(self, connection: str, ref: str) -> Account:
        """계정 ID 또는 라벨로 계정 조회

        Raises:
            NotFoundError: 커넥션 또는 계정이 없음
        """
        account = self.find_account(connection, ref)
        if account is None:
            raise NotFoundError(KIND_ACCOUNT, ref)
        return account

    def find_account(self, connection: str, ref: str) -> Account | None:
        """계정 ID 우선, 없으면 라벨로 찾기 (커넥션이 없으면 NotFoundError)"""
        return self.get(connection).find_account(normalize_name(ref))

    def set_default_account(self, connection: str, ref: str) -> Account:
        """커넥션의 기본 계정 변경

        Raises:
            NotFoundError: 커넥션 또는 계정이 없음 (기존 기본값 유지)
        """
        profile = self.get(connection)
        account = self.get_account(connection, ref)
        self._flip_default_account(profile, account.account_id)
        return account

    def _flip_default_account(self, profile: ConnectionProfile, account_id: str) -> None:
        for existing_id, account in profile.accounts.items():
            account.is_default = existing_id == account_id
        self.dirty = True
        logger.debug("기본 계정: %s/%s", profile.name, account_id)
