"""
logsh/cli/i18n/__init__.py - Internationalization (i18n) Module

Provides translation support for the CLI.
Korean (ko) is the default language, with English (en) as an option.

Architecture:
    - Messages are organized by namespace (common, connection, account, ...)
    - Translation function t() supports format string interpolation
    - Language is selected by --lang or LOGSH_LANG and kept in a context variable

Usage:
    from logsh.cli.i18n import t, set_lang

    print(t("common.cancelled"))  # "취소되었습니다" or "Cancelled"

    set_lang("en")
    print(t("connection.added", name="prod", endpoint="https://..."))
"""

from __future__ import annotations

import contextlib
from contextvars import ContextVar
from typing import Any

# Default language context
_current_lang: ContextVar[str] = ContextVar("lang", default="ko")

# Supported languages
SUPPORTED_LANGS = ("ko", "en")
DEFAULT_LANG = "ko"


def get_lang() -> str:
    """Get current language from context variable."""
    return _current_lang.get()


def set_lang(lang: str | None) -> None:
    """Set current language in context variable.

    Args:
        lang: Language code ("ko" or "en"), unknown values fall back to Korean
    """
    if lang not in SUPPORTED_LANGS:
        lang = DEFAULT_LANG
    _current_lang.set(lang)


def t(key: str, lang: str | None = None, **kwargs: Any) -> str:
    """Translate a message key to the current language.

    Args:
        key: Message key in namespace.key format (e.g., "common.cancelled")
        lang: Optional language override. If not provided, uses context variable.
        **kwargs: Format string arguments for interpolation

    Returns:
        Translated string, or key if translation not found

    Examples:
        >>> t("connection.default_set", name="prod")
        "기본 커넥션: prod"  # when lang="ko"

        >>> t("connection.default_set", lang="en", name="prod")
        "Default connection: prod"
    """
    from logsh.cli.i18n.messages import MESSAGES

    if lang is None:
        lang = get_lang()

    if lang not in SUPPORTED_LANGS:
        lang = DEFAULT_LANG

    msg_dict = MESSAGES.get(key)
    if msg_dict is None:
        return key

    text = msg_dict.get(lang)
    if text is None:
        text = msg_dict.get(DEFAULT_LANG, key)

    if kwargs:
        with contextlib.suppress(KeyError, ValueError):
            text = text.format(**kwargs)

    return text


__all__ = [
    "t",
    "get_lang",
    "set_lang",
    "SUPPORTED_LANGS",
    "DEFAULT_LANG",
]
