# tests/test_exceptions.py
"""
logsh/exceptions.py 단위 테스트
"""

from logsh.exceptions import (
    ConfigError,
    DuplicateNameError,
    InvalidEndpointError,
    LogshError,
    NoActiveContextError,
    NotFoundError,
    RegistryError,
    ValidationError,
    format_error_for_user,
)


class TestLogshError:
    """LogshError 테스트"""

    def test_str_includes_cause(self):
        error = LogshError("실패", cause=ValueError("원인"))
        assert str(error) == "실패: 원인"

    def test_with_context_keeps_first_value(self):
        """이미 기록된 커넥션/계정은 덮어쓰지 않음"""
        error = LogshError("실패").with_context("prod", "acc-1")
        error.with_context("dev", "acc-9")

        assert error.connection == "prod"
        assert error.account == "acc-1"
        assert error.details == {"connection": "prod", "account": "acc-1"}

    def test_to_dict(self):
        data = ConfigError("/tmp/x.json", "읽기 실패").to_dict()
        assert data["error_type"] == "ConfigError"
        assert data["details"]["path"] == "/tmp/x.json"


class TestHierarchy:
    """예외 계층"""

    def test_registry_errors(self):
        assert issubclass(DuplicateNameError, RegistryError)
        assert issubclass(NotFoundError, RegistryError)
        assert issubclass(InvalidEndpointError, RegistryError)

    def test_all_are_logsh_errors(self):
        for cls in (ConfigError, ValidationError, RegistryError, NoActiveContextError):
            assert issubclass(cls, LogshError)

    def test_no_active_context_reason(self):
        error = NoActiveContextError("connection_not_found", "없음", name="qa", source="env")
        assert error.reason == "connection_not_found"
        assert error.details["source"] == "env"


class TestFormatErrorForUser:
    """format_error_for_user 테스트"""

    def test_with_connection_and_account(self):
        error = NotFoundError("계정", "x").with_context("prod", "acc-1")
        assert format_error_for_user(error).endswith("[prod/acc-1]")

    def test_with_connection_only(self):
        error = ValidationError("query", "비어 있음").with_context("prod")
        assert format_error_for_user(error).endswith("[prod]")

    def test_plain_exception(self):
        assert format_error_for_user(RuntimeError("boom")) == "boom"
