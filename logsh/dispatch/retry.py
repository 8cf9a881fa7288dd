"""
logsh/dispatch/retry.py - 재시도 정책

멱등 요청의 일시적 실패(전송 실패, 5xx)를 지수 백오프 + full jitter로
재시도합니다. 정책은 상태가 없는 불변 값이며, 실제 대기는 Dispatcher가
주입받은 sleep 함수로 수행합니다.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass

from logsh.config import get_max_attempts, settings

from .errors import ErrorCategory, is_retryable


@dataclass(frozen=True)
class RetryPolicy:
    """재시도 설정

    Attributes:
        max_attempts: 최대 시도 횟수 (첫 시도 포함, 1이면 재시도 안함)
        base_delay: 기본 대기 시간 (초)
        max_delay: 최대 대기 시간 (초)
        exponential_base: 지수 백오프 밑수
        max_elapsed: 전체 재시도 시간 상한 (초, None이면 제한 없음)
    """

    max_attempts: int = settings.RETRY_MAX_ATTEMPTS
    base_delay: float = settings.RETRY_BASE_DELAY
    max_delay: float = settings.RETRY_MAX_DELAY
    exponential_base: float = settings.RETRY_EXPONENTIAL_BASE
    max_elapsed: float | None = None

    @classmethod
    def from_env(cls) -> RetryPolicy:
        """LOGSH_MAX_ATTEMPTS 환경 변수를 반영한 정책"""
        return cls(max_attempts=get_max_attempts())

    def get_delay(self, attempt: int, rand: Callable[[], float] = random.random) -> float:
        """재시도 대기 시간 계산

        Full jitter: [0, min(max_delay, base_delay * exponential_base ** attempt)]

        Args:
            attempt: 실패한 시도 순번 (0부터 시작)
            rand: [0, 1) 난수 함수

        Returns:
            대기 시간 (초)
        """
        delay = self.base_delay * (self.exponential_base**attempt)
        delay = min(delay, self.max_delay)
        return rand() * delay

    def should_retry(
        self,
        attempt: int,
        elapsed: float,
        category: ErrorCategory,
        idempotent: bool,
    ) -> bool:
        """다음 시도를 할지 결정

        Args:
            attempt: 지금까지 수행한 시도 횟수 (1부터 시작)
            elapsed: 첫 시도 이후 경과 시간 (초)
            category: 마지막 실패의 분류
            idempotent: 요청이 멱등인지
        """
        if not idempotent or not is_retryable(category):
            return False
        if attempt >= self.max_attempts:
            return False
        if self.max_elapsed is not None and elapsed >= self.max_elapsed:
            return False
        return True

