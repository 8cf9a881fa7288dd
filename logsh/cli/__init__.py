# logsh/cli - 명령줄 인터페이스 (click, rich, questionary)
"""
logsh 명령줄 인터페이스

Note:
    cli 객체는 click/rich 로딩 비용을 피하기 위해 지연 import 됩니다.
"""

__all__ = ["cli", "main"]

_IMPORT_MAPPING = {
    "cli": (".app", "cli"),
    "main": (".app", "main"),
}


def __getattr__(name: str):
    """Lazy import로 속성 접근"""
    if name in _IMPORT_MAPPING:
        module_path, attr_name = _IMPORT_MAPPING[name]
        from importlib import import_module

        module = import_module(module_path, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
