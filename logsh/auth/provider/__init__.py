"""
logsh 인증 Provider 구현 모듈

이 모듈은 인증 방식별로 세션 자격 증명을 획득하는 Provider 클래스들을 제공합니다.

Provider 목록:
- PasswordProvider: 사용자 이름/비밀번호 로그인 (/auth/token)
- DeviceFlowProvider: OAuth 디바이스 코드 플로우 (/auth/oauth)
- ApiKeyProvider: 장기 API 키 (교환 없음)

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # Base
    "BaseProvider",
    "build_session_token",
    "is_auth_rejection",
    "jwt_expiry",
    # Providers
    "PasswordProvider",
    "DeviceFlowProvider",
    "OAuthConfig",
    "ApiKeyProvider",
    # Strategy mapping
    "STRATEGIES",
    "create_provider",
]

_IMPORT_MAPPING = {
    "BaseProvider": (".base", "BaseProvider"),
    "build_session_token": (".base", "build_session_token"),
    "is_auth_rejection": (".base", "is_auth_rejection"),
    "jwt_expiry": (".base", "jwt_expiry"),
    "PasswordProvider": (".password", "PasswordProvider"),
    "DeviceFlowProvider": (".device", "DeviceFlowProvider"),
    "OAuthConfig": (".device", "OAuthConfig"),
    "ApiKeyProvider": (".api_key", "ApiKeyProvider"),
    "STRATEGIES": (".strategies", "STRATEGIES"),
    "create_provider": (".strategies", "create_provider"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
