"""
logsh 자격 증명 저장소 모듈

계정별 API 키와 세션 토큰을 보관합니다. 레지스트리 파일과 함께
영속화되며, 세션 토큰은 선언된 수명을 넘어 저장되지 않습니다.

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "ApiKeyCredential",
    "SessionToken",
    "Credential",
    "CredentialStore",
    "credential_from_dict",
    "utcnow",
]

_IMPORT_MAPPING = {
    "ApiKeyCredential": (".cache", "ApiKeyCredential"),
    "SessionToken": (".cache", "SessionToken"),
    "Credential": (".cache", "Credential"),
    "CredentialStore": (".cache", "CredentialStore"),
    "credential_from_dict": (".cache", "credential_from_dict"),
    "utcnow": (".cache", "utcnow"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
