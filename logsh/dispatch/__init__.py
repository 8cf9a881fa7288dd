"""
logsh 요청 디스패치 모듈

활성 컨텍스트로 플랫폼 API 요청을 보내고, 재시도/백오프와
에러 분류를 적용합니다.

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # Dispatcher
    "Dispatcher",
    "RequestDescriptor",
    "DispatchResponse",
    # Retry
    "RetryPolicy",
    # HTTP
    "build_http_session",
    # Errors
    "ErrorCategory",
    "DispatchError",
    "UnauthorizedError",
    "ClientError",
    "ServerError",
    "TransportFailureError",
    "categorize_error",
    "is_retryable",
]

_IMPORT_MAPPING = {
    "Dispatcher": (".dispatcher", "Dispatcher"),
    "RequestDescriptor": (".dispatcher", "RequestDescriptor"),
    "DispatchResponse": (".dispatcher", "DispatchResponse"),
    "RetryPolicy": (".retry", "RetryPolicy"),
    "build_http_session": (".client", "build_http_session"),
    "ErrorCategory": (".errors", "ErrorCategory"),
    "DispatchError": (".errors", "DispatchError"),
    "UnauthorizedError": (".errors", "UnauthorizedError"),
    "ClientError": (".errors", "ClientError"),
    "ServerError": (".errors", "ServerError"),
    "TransportFailureError": (".errors", "TransportFailureError"),
    "categorize_error": (".errors", "categorize_error"),
    "is_retryable": (".errors", "is_retryable"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
