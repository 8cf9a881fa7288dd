# tests/registry/test_registry.py
"""
logsh/registry/models.py, logsh/registry/registry.py 단위 테스트

엔드포인트 검증, 커넥션/계정 추가·삭제·기본값 변경 테스트.
"""

import itertools

import pytest

from logsh.auth.cache import ApiKeyCredential, SessionToken
from logsh.auth.types import AuthMethod
from logsh.exceptions import DuplicateNameError, InvalidEndpointError, NotFoundError, ValidationError
from logsh.registry.models import Account, ConnectionProfile, validate_endpoint
from logsh.registry.registry import Registry

# =============================================================================
# 모델
# =============================================================================


class TestValidateEndpoint:
    """validate_endpoint 테스트"""

    def test_strips_trailing_slash(self):
        assert validate_endpoint(" https://logs.example.com/ ") == "https://logs.example.com"

    def test_keeps_path_and_port(self):
        assert validate_endpoint("http://localhost:5000/api/") == "http://localhost:5000/api"

    @pytest.mark.parametrize(
        "endpoint",
        [
            "",
            "logs.example.com",
            "ftp://logs.example.com",
            "https://",
            "http://host:notaport",
        ],
    )
    def test_invalid(self, endpoint):
        with pytest.raises(InvalidEndpointError):
            validate_endpoint(endpoint)


class TestModels:
    """Account / ConnectionProfile 테스트"""

    def test_credential_ref(self):
        account = Account("acc-1", "ops", AuthMethod.PASSWORD, connection="prod", username="alice")
        assert account.credential_ref == "prod/acc-1"

    def test_display_name(self):
        assert Account("acc-1", "ops", AuthMethod.API_KEY, "prod").display_name == "ops (acc-1)"
        assert Account("acc-1", "acc-1", AuthMethod.API_KEY, "prod").display_name == "acc-1"

    def test_find_account_prefers_id(self):
        """ID와 라벨이 겹치면 ID가 우선"""
        profile = ConnectionProfile("prod", "https://prod.example.com")
        profile.accounts["a"] = Account("a", "first", AuthMethod.API_KEY, "prod")
        profile.accounts["b"] = Account("b", "a", AuthMethod.API_KEY, "prod")

        assert profile.find_account("a").account_id == "a"
        assert profile.find_account("first").account_id == "a"
        assert profile.find_account("zzz") is None

    def test_added_at_unknown_is_omitted(self):
        """추가 시각이 없으면 저장 형식에서 필드를 생략 (로드 시 임의로 채우지 않음)"""
        profile = ConnectionProfile("prod", "https://prod.example.com")
        assert profile.added_at == ""
        assert "added_at" not in profile.to_dict()

    def test_add_records_added_at(self):
        registry = Registry()
        registry.add("prod", "https://prod.example.com")
        assert registry.get("prod").added_at


# =============================================================================
# 커넥션
# =============================================================================


class TestRegistryConnections:
    """커넥션 추가/삭제/기본값"""

    def test_first_connection_becomes_default(self):
        registry = Registry()
        registry.add("prod", "https://prod.example.com")
        registry.add("dev", "https://dev.example.com")

        assert registry.default_profile().name == "prod"
        assert registry.get("dev").is_default is False
        assert registry.dirty is True

    def test_make_default_flips_previous(self):
        registry = Registry()
        registry.add("prod", "https://prod.example.com")
        registry.add("dev", "https://dev.example.com", make_default=True)

        assert registry.default_profile().name == "dev"
        assert registry.get("prod").is_default is False

    def test_endpoint_is_normalized(self, registry):
        assert registry.get("dev").endpoint == "https://dev.example.com"

    def test_duplicate_name(self, registry):
        with pytest.raises(DuplicateNameError):
            registry.add("prod", "https://other.example.com")

    def test_empty_name(self):
        with pytest.raises(ValidationError):
            Registry().add("  ", "https://prod.example.com")

    def test_invalid_endpoint_leaves_registry_unchanged(self, registry):
        with pytest.raises(InvalidEndpointError):
            registry.add("qa", "qa.example.com")
        assert "qa" not in registry
        assert registry.dirty is False

    def test_remove_default_leaves_no_default(self, registry):
        """기본 커넥션을 삭제하면 다른 커넥션을 승격하지 않음"""
        registry.remove("prod")
        assert registry.default_profile() is None
        assert len(registry) == 1

    def test_remove_cascades_credentials(self, registry, now):
        registry.credentials.put("prod/acc-2", ApiKeyCredential("key"))
        registry.credentials.put("dev/acc-9", ApiKeyCredential("other"))

        registry.remove("prod")

        assert "prod/acc-2" not in registry.credentials
        assert "dev/acc-9" in registry.credentials

    def test_remove_keeps_credentials_of_similar_names(self, registry):
        """이름이 접두사로 겹치는 다른 커넥션의 자격 증명은 유지"""
        registry.add("prod-eu", "https://eu.example.com")
        registry.add_account("prod-eu", "acc-2", None, AuthMethod.API_KEY)
        registry.credentials.put("prod/acc-2", ApiKeyCredential("key"))
        registry.credentials.put("prod-eu/acc-2", ApiKeyCredential("key-eu"))

        registry.remove("prod")

        assert registry.credentials.find("prod-eu/acc-2") == ApiKeyCredential("key-eu")

    @pytest.mark.parametrize("name", ["team/eu", "/team", "team/"])
    def test_separator_in_name_rejected(self, registry, name):
        with pytest.raises(ValidationError):
            registry.add(name, "https://team.example.com")
        assert len(registry) == 2

    def test_remove_missing(self, registry):
        with pytest.raises(NotFoundError):
            registry.remove("qa")

    def test_set_default_missing_keeps_previous(self, registry):
        with pytest.raises(NotFoundError):
            registry.set_default("qa")
        assert registry.default_profile().name == "prod"

    def test_names_are_normalized_on_lookup(self, registry):
        """add와 같은 규칙(앞뒤 공백 제거)으로 조회"""
        assert registry.get(" dev ").name == "dev"
        assert " dev" in registry
        assert registry.set_default("dev ").name == "dev"
        assert registry.remove("  dev").name == "dev"
        assert "dev" not in registry

    def test_at_most_one_default_after_every_step(self):
        """추가/삭제/기본값 변경을 어떤 순서로 해도 기본 커넥션은 최대 하나"""
        names = ["a", "b", "c"]
        operations = [("add", n) for n in names] + [("default", n) for n in names] + [("remove", n) for n in names]

        for sequence in itertools.permutations(operations, 5):
            registry = Registry()
            for op, name in sequence:
                if op == "add" and name not in registry:
                    registry.add(name, f"https://{name}.example.com", make_default=name == "b")
                elif op == "default" and name in registry:
                    registry.set_default(name)
                elif op == "remove" and name in registry:
                    registry.remove(name)
                assert sum(p.is_default for p in registry.list()) <= 1, sequence

    def test_list_sorted_and_live(self, registry):
        """목록은 이름순이며, 다시 순회하면 최신 상태를 반영"""
        listing = registry.list()
        assert [p.name for p in listing] == ["dev", "prod"]

        registry.add("alpha", "https://alpha.example.com")
        assert [p.name for p in listing] == ["alpha", "dev", "prod"]
        assert len(listing) == 3


# =============================================================================
# 계정
# =============================================================================


class TestRegistryAccounts:
    """계정 추가/삭제/기본값"""

    def test_first_account_becomes_default(self, registry):
        profile = registry.get("prod")
        assert profile.default_account.account_id == "acc-1"
        assert profile.accounts["acc-2"].is_default is False

    def test_label_defaults_to_id(self, registry):
        account = registry.add_account("dev", "acc-10", None, AuthMethod.API_KEY)
        assert account.label == "acc-10"

    def test_password_requires_username(self, registry):
        with pytest.raises(ValidationError):
            registry.add_account("prod", "acc-3", "x", AuthMethod.PASSWORD)

    def test_duplicate_id(self, registry):
        with pytest.raises(DuplicateNameError):
            registry.add_account("prod", "acc-1", "other", AuthMethod.API_KEY)

    def test_duplicate_label(self, registry):
        with pytest.raises(DuplicateNameError):
            registry.add_account("prod", "acc-3", "ops", AuthMethod.API_KEY)

    def test_same_id_in_other_connection_allowed(self, registry):
        account = registry.add_account("dev", "acc-1", "ops", AuthMethod.API_KEY)
        assert account.credential_ref == "dev/acc-1"

    @pytest.mark.parametrize("account_id", ["b/c", "/acc"])
    def test_separator_in_account_id_rejected(self, registry, account_id):
        with pytest.raises(ValidationError):
            registry.add_account("prod", account_id, None, AuthMethod.API_KEY)

    def test_credential_refs_are_unique(self, registry):
        """커넥션이 다르면 같은 ID라도 자격 증명 키가 겹치지 않음"""
        refs = [a.credential_ref for p in registry.list() for a in p.accounts.values()]
        registry.add("prod2", "https://prod2.example.com")
        refs.append(registry.add_account("prod2", "acc-1", None, AuthMethod.API_KEY).credential_ref)
        assert len(refs) == len(set(refs))

    def test_missing_connection(self, registry):
        with pytest.raises(NotFoundError):
            registry.add_account("qa", "acc-1", None, AuthMethod.API_KEY)

    def test_set_default_by_label(self, registry):
        account = registry.set_default_account("prod", "bot")
        assert account.account_id == "acc-2"
        assert registry.get("prod").default_account.account_id == "acc-2"
        assert registry.get("prod").accounts["acc-1"].is_default is False

    def test_remove_account_removes_credential(self, registry, now):
        token = SessionToken("t", issued_at=now, expires_at=now)
        registry.credentials.put("prod/acc-1", token)

        removed = registry.remove_account("prod", "ops")

        assert removed.account_id == "acc-1"
        assert "acc-1" not in registry.get("prod").accounts
        assert "prod/acc-1" not in registry.credentials

    def test_remove_missing_account(self, registry):
        with pytest.raises(NotFoundError):
            registry.remove_account("prod", "nope")

    def test_needs_save_tracks_credentials(self, registry):
        assert registry.needs_save is False
        registry.credentials.put("prod/acc-2", ApiKeyCredential("key"))
        assert registry.needs_save is True
