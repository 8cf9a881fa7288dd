# tests/auth/test_auth_resolver.py
"""
logsh/auth/resolver.py 단위 테스트

우선순위 (인자 > 환경 변수 > 기본값)와 실패 사유 코드 테스트.
"""

import pytest

from logsh.auth.resolver import ContextResolver
from logsh.auth.types import AuthMethod
from logsh.exceptions import NoActiveContextError
from logsh.registry.registry import Registry


def env_of(**values):
    """환경 변수 조회 함수 (LOGSH_CONNECTION=... 형식)"""
    return lambda name: values.get(name)


class TestResolveProfile:
    """커넥션 결정"""

    def test_default(self, registry):
        resolver = ContextResolver(registry, env=env_of())
        assert resolver.resolve_profile().name == "prod"

    def test_env_overrides_default(self, registry):
        resolver = ContextResolver(registry, env=env_of(LOGSH_CONNECTION="dev"))
        assert resolver.resolve_profile().name == "dev"

    def test_argument_overrides_env(self, registry):
        resolver = ContextResolver(registry, env=env_of(LOGSH_CONNECTION="dev"))
        assert resolver.resolve_profile("prod").name == "prod"

    def test_no_connections(self):
        with pytest.raises(NoActiveContextError) as exc_info:
            ContextResolver(Registry(), env=env_of()).resolve_profile("prod")
        assert exc_info.value.reason == "no_connections"

    def test_unknown_argument(self, registry):
        with pytest.raises(NoActiveContextError) as exc_info:
            ContextResolver(registry, env=env_of()).resolve_profile("qa")
        assert exc_info.value.reason == "connection_not_found"
        assert exc_info.value.source == "argument"
        assert exc_info.value.name == "qa"

    def test_unknown_env_does_not_fall_back(self, registry):
        """환경 변수가 가리키는 커넥션이 없으면 기본값으로 넘어가지 않음"""
        with pytest.raises(NoActiveContextError) as exc_info:
            ContextResolver(registry, env=env_of(LOGSH_CONNECTION="qa")).resolve_profile()
        assert exc_info.value.reason == "connection_not_found"
        assert exc_info.value.source == "env"

    def test_no_default(self, registry):
        registry.remove("prod")
        with pytest.raises(NoActiveContextError) as exc_info:
            ContextResolver(registry, env=env_of()).resolve_profile()
        assert exc_info.value.reason == "no_default_connection"


class TestResolveAccount:
    """계정 결정"""

    def test_default_account(self, registry):
        profile, account = ContextResolver(registry, env=env_of()).resolve()
        assert (profile.name, account.account_id) == ("prod", "acc-1")

    def test_label_argument(self, registry):
        _, account = ContextResolver(registry, env=env_of()).resolve(account_label="bot")
        assert account.account_id == "acc-2"

    def test_env_account(self, registry):
        _, account = ContextResolver(registry, env=env_of(LOGSH_ACCOUNT="acc-2")).resolve()
        assert account.account_id == "acc-2"

    def test_unknown_account(self, registry):
        with pytest.raises(NoActiveContextError) as exc_info:
            ContextResolver(registry, env=env_of()).resolve("prod", "ghost")
        assert exc_info.value.reason == "account_not_found"
        assert exc_info.value.connection == "prod"

    def test_no_accounts(self, registry):
        registry.add("empty", "https://empty.example.com")
        with pytest.raises(NoActiveContextError) as exc_info:
            ContextResolver(registry, env=env_of()).resolve("empty")
        assert exc_info.value.reason == "no_accounts"

    def test_no_default_account(self, registry):
        for account in registry.get("prod").accounts.values():
            account.is_default = False
        with pytest.raises(NoActiveContextError) as exc_info:
            ContextResolver(registry, env=env_of()).resolve("prod")
        assert exc_info.value.reason == "no_default_account"

    def test_different_arguments_give_different_contexts(self, registry):
        """같은 레지스트리에서 인자만 바꿔 서로 다른 컨텍스트를 얻음"""
        registry.add_account("dev", "acc-1", "ops", AuthMethod.API_KEY)
        resolver = ContextResolver(registry, env=env_of())

        prod = resolver.resolve("prod", "ops")
        dev = resolver.resolve("dev", "ops")

        assert prod[0].endpoint != dev[0].endpoint
        assert prod[1].credential_ref == "prod/acc-1"
        assert dev[1].credential_ref == "dev/acc-1"

    def test_explicit_connection_ignores_other_default(self, registry):
        """기본 커넥션을 dev로 바꿔도 prod를 지정하면 prod의 기본 계정"""
        registry.set_default("dev")

        profile, account = ContextResolver(registry, env=env_of()).resolve("prod")

        assert (profile.name, account.account_id) == ("prod", "acc-1")
        assert ContextResolver(registry, env=env_of()).resolve()[1].account_id == "acc-9"
