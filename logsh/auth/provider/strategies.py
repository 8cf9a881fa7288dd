"""
logsh/auth/provider/strategies.py - 인증 방식별 Provider 선택

AuthMethod(닫힌 집합) 하나당 Provider 구현 하나가 대응합니다.
"""

from __future__ import annotations

from typing import Any

from ..types import AuthMethod
from .api_key import ApiKeyProvider
from .base import BaseProvider
from .device import DeviceFlowProvider
from .password import PasswordProvider

STRATEGIES: dict[AuthMethod, type[BaseProvider]] = {
    AuthMethod.PASSWORD: PasswordProvider,
    AuthMethod.API_KEY: ApiKeyProvider,
    AuthMethod.DEVICE_FLOW: DeviceFlowProvider,
}


def create_provider(method: AuthMethod, **kwargs: Any) -> BaseProvider:
    """인증 방식에 맞는 Provider 생성

    Args:
        method: 인증 방식
        **kwargs: Provider 생성자 인자 (prompter, now, sleep, timeout)
    """
    return STRATEGIES[method](**kwargs)
