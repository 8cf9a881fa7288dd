"""
logsh/auth/resolver.py - 활성 커넥션/계정 결정

필드별 우선순위 (먼저 일치하는 것이 이김):
    1. 명시적 인자 (--connection / --account)
    2. 환경 변수 (LOGSH_CONNECTION / LOGSH_ACCOUNT)
    3. 저장된 기본값

결정할 수 없으면 NoActiveContextError를 발생시킵니다.
"첫 번째" 항목을 임의로 고르지 않습니다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from logsh.config import ENV_ACCOUNT, ENV_CONNECTION, get_env_str
from logsh.exceptions import NoActiveContextError
from logsh.registry.models import Account, ConnectionProfile
from logsh.registry.registry import Registry

logger = logging.getLogger(__name__)

SOURCE_ARGUMENT = "argument"
SOURCE_ENV = "env"
SOURCE_DEFAULT = "default"


class ContextResolver:
    """활성 (커넥션, 계정) 쌍 결정

    Args:
        registry: 커넥션 레지스트리
        env: 환경 변수 조회 함수 (테스트에서 주입)
    """

    def __init__(self, registry: Registry, env: Callable[[str], str | None] = get_env_str):
        self.registry = registry
        self.env = env

    def _pick(self, explicit: str | None, env_name: str) -> tuple[str | None, str]:
        if explicit:
            return explicit, SOURCE_ARGUMENT
        value = self.env(env_name)
        if value:
            return value, SOURCE_ENV
        return None, SOURCE_DEFAULT

    def resolve_profile(self, connection_name: str | None = None) -> ConnectionProfile:
        """활성 커넥션 결정

        Raises:
            NoActiveContextError: 레지스트리가 비어 있음, 지정한 커넥션 없음, 기본 커넥션 없음
        """
        if self.registry.is_empty():
            raise NoActiveContextError(
                "no_connections",
                "등록된 커넥션이 없습니다 (logsh connection add NAME ENDPOINT)",
            )

        name, source = self._pick(connection_name, ENV_CONNECTION)
        if name is not None:
            profile = self.registry.find(name)
            if profile is None:
                origin = f"환경 변수 {ENV_CONNECTION}" if source == SOURCE_ENV else "인자"
                raise NoActiveContextError(
                    "connection_not_found",
                    f"커넥션을 찾을 수 없습니다: {name} ({origin})",
                    name=name,
                    source=source,
                )
            logger.debug("커넥션 결정: %s (%s)", name, source)
            return profile

        profile = self.registry.default_profile()
        if profile is None:
            raise NoActiveContextError(
                "no_default_connection",
                "기본 커넥션이 없습니다 (logsh connection default NAME 또는 --connection)",
            )
        logger.debug("커넥션 결정: %s (default)", profile.name)
        return profile

    def resolve_account(self, profile: ConnectionProfile, account_label: str | None = None) -> Account:
        """커넥션 안에서 활성 계정 결정

        Raises:
            NoActiveContextError: 계정 없음, 지정한 계정 없음, 기본 계정 없음
        """
        if not profile.accounts:
            raise NoActiveContextError(
                "no_accounts",
                f"커넥션 '{profile.name}'에 등록된 계정이 없습니다 (logsh account add)",
                name=profile.name,
            ).with_context(profile.name)

        ref, source = self._pick(account_label, ENV_ACCOUNT)
        if ref is not None:
            account = profile.find_account(ref)
            if account is None:
                origin = f"환경 변수 {ENV_ACCOUNT}" if source == SOURCE_ENV else "인자"
                raise NoActiveContextError(
                    "account_not_found",
                    f"계정을 찾을 수 없습니다: {ref} ({origin})",
                    name=ref,
                    source=source,
                ).with_context(profile.name)
            logger.debug("계정 결정: %s (%s)", account.credential_ref, source)
            return account

        account = profile.default_account
        if account is None:
            raise NoActiveContextError(
                "no_default_account",
                f"커넥션 '{profile.name}'에 기본 계정이 없습니다 (logsh account default REF 또는 --account)",
                name=profile.name,
            ).with_context(profile.name)
        logger.debug("계정 결정: %s (default)", account.credential_ref)
        return account

    def resolve(
        self,
        connection_name: str | None = None,
        account_label: str | None = None,
    ) -> tuple[ConnectionProfile, Account]:
        """활성 (커넥션, 계정) 결정

        Args:
            connection_name: 명시적 커넥션 이름
            account_label: 명시적 계정 ID 또는 라벨

        Raises:
            NoActiveContextError: 결정할 수 없음
        """
        profile = self.resolve_profile(connection_name)
        return profile, self.resolve_account(profile, account_label)
