"""
logsh/cli/i18n/messages/__init__.py - Message Registry

Aggregates all message dictionaries from sub-modules.

Structure:
    MESSAGES = {
        "common.cancelled": {"ko": "...", "en": "..."},
        "connection.added": {"ko": "...", "en": "..."},
        ...
    }
"""

from __future__ import annotations

from typing import TypedDict


class MessageDict(TypedDict):
    """Message dictionary type."""

    ko: str
    en: str


# Master message registry
MESSAGES: dict[str, MessageDict] = {}


def register_messages(namespace: str, messages: dict[str, MessageDict]) -> None:
    """Register messages for a namespace.

    Args:
        namespace: Namespace prefix (e.g., "common", "connection")
        messages: Dictionary of message key -> translations
    """
    for key, value in messages.items():
        MESSAGES[f"{namespace}.{key}"] = value


# Import and register all message modules
# These imports must come after register_messages is defined
from logsh.cli.i18n.messages.account import ACCOUNT_MESSAGES  # noqa: E402
from logsh.cli.i18n.messages.commands import COMMAND_MESSAGES  # noqa: E402
from logsh.cli.i18n.messages.common import COMMON_MESSAGES  # noqa: E402
from logsh.cli.i18n.messages.connection import CONNECTION_MESSAGES  # noqa: E402

register_messages("common", COMMON_MESSAGES)
register_messages("connection", CONNECTION_MESSAGES)
register_messages("account", ACCOUNT_MESSAGES)
register_messages("cmd", COMMAND_MESSAGES)

__all__ = ["MESSAGES", "register_messages", "MessageDict"]
