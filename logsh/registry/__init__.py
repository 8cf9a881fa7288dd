"""
logsh 커넥션 레지스트리 모듈

이름이 붙은 서버 엔드포인트와 계정을 관리하고 설정 파일에 영속화합니다.

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # Models
    "Account",
    "ConnectionProfile",
    "validate_endpoint",
    # Registry
    "Registry",
    "ProfileListing",
    # Persistence
    "RegistryStore",
    "load_registry",
    "save_registry",
    "Workspace",
]

_IMPORT_MAPPING = {
    "Account": (".models", "Account"),
    "ConnectionProfile": (".models", "ConnectionProfile"),
    "validate_endpoint": (".models", "validate_endpoint"),
    "Registry": (".registry", "Registry"),
    "ProfileListing": (".registry", "ProfileListing"),
    "RegistryStore": (".store", "RegistryStore"),
    "load_registry": (".store", "load_registry"),
    "save_registry": (".store", "save_registry"),
    "Workspace": (".store", "Workspace"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
