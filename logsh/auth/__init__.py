"""
logsh 인증 모듈 (logsh/auth)

커넥션마다 여러 계정을 두고, 계정별 인증 방식으로 세션 자격 증명을
확보/캐시/갱신합니다.

지원하는 인증 방식:
- PasswordProvider: 사용자 이름/비밀번호 → 세션 토큰
- DeviceFlowProvider: OAuth 디바이스 코드 플로우 → 세션 토큰
- ApiKeyProvider: 장기 API 키 (교환 없음)

사용 예시:
    from logsh.auth import SessionManager
    from logsh.registry import load_registry

    registry = load_registry()
    manager = SessionManager(registry, prompter=CliPrompter())

    context = manager.acquire_context("prod")
    print(context.base_url, context.account.account_id)

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
    실제 사용 시점에만 하위 모듈이 로드되어 CLI 시작 시간을 최적화합니다.
"""

__all__ = [
    # Types
    "AuthMethod",
    "Provider",
    "Prompter",
    "AuthError",
    "NoCredentialError",
    "AuthenticationFailedError",
    "ConnectionUnavailableError",
    # Cache
    "ApiKeyCredential",
    "SessionToken",
    "Credential",
    "CredentialStore",
    # Providers
    "BaseProvider",
    "PasswordProvider",
    "DeviceFlowProvider",
    "ApiKeyProvider",
    "STRATEGIES",
    "create_provider",
    # Session
    "ActiveContext",
    "SessionManager",
    "ContextResolver",
]

_IMPORT_MAPPING = {
    # Types
    "AuthMethod": (".types", "AuthMethod"),
    "Provider": (".types", "Provider"),
    "Prompter": (".types", "Prompter"),
    "AuthError": (".types", "AuthError"),
    "NoCredentialError": (".types", "NoCredentialError"),
    "AuthenticationFailedError": (".types", "AuthenticationFailedError"),
    "ConnectionUnavailableError": (".types", "ConnectionUnavailableError"),
    # Cache
    "ApiKeyCredential": (".cache", "ApiKeyCredential"),
    "SessionToken": (".cache", "SessionToken"),
    "Credential": (".cache", "Credential"),
    "CredentialStore": (".cache", "CredentialStore"),
    # Providers
    "BaseProvider": (".provider", "BaseProvider"),
    "PasswordProvider": (".provider", "PasswordProvider"),
    "DeviceFlowProvider": (".provider", "DeviceFlowProvider"),
    "ApiKeyProvider": (".provider", "ApiKeyProvider"),
    "STRATEGIES": (".provider", "STRATEGIES"),
    "create_provider": (".provider", "create_provider"),
    # Session
    "ActiveContext": (".session", "ActiveContext"),
    "SessionManager": (".session", "SessionManager"),
    "ContextResolver": (".resolver", "ContextResolver"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
