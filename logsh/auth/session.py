"""
logsh/auth/session.py - 세션 관리자

활성 커넥션/계정을 결정하고, 유효한 자격 증명을 확보한 뒤
ActiveContext로 묶어 돌려줍니다.

흐름:
    1. ContextResolver로 (커넥션, 계정) 결정
    2. 저장된 자격 증명이 유효하면 그대로 사용
    3. 아니면 refresh 시도 → 거부되면 전체 로그인 한 번
    4. 성공한 응답을 받은 뒤에만 CredentialStore.put

실패 분류:
    - AuthenticationFailedError: 자격 증명 거부 → 캐시된 세션 토큰 폐기
    - ConnectionUnavailableError: 전송 실패 → 저장소 변경 없음

동시성:
    credential_ref 별 잠금으로 한 프로세스 안에서 획득을 직렬화합니다.
    여러 프로세스가 동시에 로그인하면 파일 저장은 마지막 저장이 이깁니다.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import requests

from logsh.dispatch.client import build_http_session
from logsh.registry.models import Account, ConnectionProfile
from logsh.registry.registry import Registry

from .cache import ApiKeyCredential, Credential, CredentialStore, SessionToken, utcnow
from .provider import create_provider
from .provider.base import BaseProvider
from .resolver import ContextResolver
from .types import AuthenticationFailedError, AuthMethod, ConnectionUnavailableError, Prompter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveContext:
    """명령 하나가 사용하는 (커넥션, 계정, 자격 증명)

    Attributes:
        profile: 활성 커넥션
        account: 활성 계정
        credential: 유효한 자격 증명
    """

    profile: ConnectionProfile
    account: Account
    credential: Credential

    @property
    def base_url(self) -> str:
        return self.profile.endpoint

    @property
    def auth_header(self) -> str:
        return f"Bearer {self.credential.bearer}"

    @property
    def verify_tls(self) -> bool:
        return not self.profile.insecure_skip_verify

    @property
    def label(self) -> str:
        return f"{self.profile.name}/{self.account.account_id}"


class SessionManager:
    """세션 관리자

    Args:
        registry: 커넥션 레지스트리 (자격 증명 저장소 포함)
        http: 인증 교환에 사용할 requests.Session
        prompter: 비밀번호/디바이스 코드 입력 담당
        now: 현재 UTC 시각 함수 (테스트에서 주입)
        resolver: 컨텍스트 결정기 (None이면 환경 변수를 읽는 기본 구현)
        providers: 인증 방식별 Provider 재정의 (테스트에서 주입)
    """

    def __init__(
        self,
        registry: Registry,
        http: requests.Session | None = None,
        prompter: Prompter | None = None,
        now: Callable[[], datetime] = utcnow,
        resolver: ContextResolver | None = None,
        providers: dict[AuthMethod, BaseProvider] | None = None,
    ):
        self.registry = registry
        self.http = http or build_http_session()
        self.prompter = prompter
        self.now = now
        self.resolver = resolver or ContextResolver(registry)
        self._providers: dict[AuthMethod, BaseProvider] = dict(providers or {})
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def credentials(self) -> CredentialStore:
        return self.registry.credentials

    def provider_for(self, method: AuthMethod) -> BaseProvider:
        if method not in self._providers:
            self._providers[method] = create_provider(method, prompter=self.prompter, now=self.now)
        return self._providers[method]

    def _lock_for(self, ref: str) -> threading.Lock:
        with self._locks_guard:
            if ref not in self._locks:
                self._locks[ref] = threading.Lock()
            return self._locks[ref]

    # =========================================================================
    # 공개 API
    # =========================================================================

    def acquire_context(
        self,
        connection_name: str | None = None,
        account_label: str | None = None,
    ) -> ActiveContext:
        """활성 컨텍스트 확보 (필요하면 로그인/갱신)

        Raises:
            NoActiveContextError: 커넥션/계정을 결정할 수 없음
            AuthenticationFailedError: 자격 증명 거부 또는 API 키 미등록
            ConnectionUnavailableError: 인증 서버 연결 실패
        """
        profile, account = self.resolver.resolve(connection_name, account_label)
        credential = self._ensure(profile, account)
        return ActiveContext(profile, account, credential)

    def reacquire(self, context: ActiveContext) -> ActiveContext:
        """서버가 거부한 자격 증명을 폐기하고 다시 확보

        다른 스레드가 이미 새 토큰으로 교체했으면 그 토큰을 사용합니다.
        API 키는 폐기하지 않고 그대로 반환합니다.
        """
        profile, account = context.profile, context.account
        ref = account.credential_ref

        with self._lock_for(ref):
            current = self.credentials.find(ref)
            if isinstance(current, ApiKeyCredential) or not account.auth_method.uses_session_token:
                return ActiveContext(profile, account, self._api_key(profile, account, current))

            if (
                isinstance(current, SessionToken)
                and current.bearer != context.credential.bearer
                and self.credentials.is_valid(current, self.now())
            ):
                logger.debug("이미 갱신된 토큰 사용: %s", ref)
                return ActiveContext(profile, account, current)

            self.credentials.invalidate(ref)
            previous = current if isinstance(current, SessionToken) else None
            token = self._obtain(profile, account, previous)
        return ActiveContext(profile, account, token)

    def login(
        self,
        connection_name: str | None = None,
        account_label: str | None = None,
    ) -> ActiveContext:
        """캐시와 관계없이 전체 로그인 (API 키 계정은 등록 여부만 확인)"""
        profile, account = self.resolver.resolve(connection_name, account_label)
        ref = account.credential_ref

        with self._lock_for(ref):
            if not account.auth_method.uses_session_token:
                credential: Credential = self._api_key(profile, account, self.credentials.find(ref))
            else:
                credential = self._obtain(profile, account, None)
        return ActiveContext(profile, account, credential)

    def logout(
        self,
        connection_name: str | None = None,
        account_label: str | None = None,
    ) -> tuple[Account, bool]:
        """계정의 자격 증명 폐기

        세션 계정은 캐시된 토큰을, API 키 계정은 등록된 키를 삭제합니다.

        Returns:
            (계정, 삭제 여부)
        """
        profile, account = self.resolver.resolve(connection_name, account_label)
        ref = account.credential_ref
        with self._lock_for(ref):
            if not account.auth_method.uses_session_token:
                removed = self.credentials.remove(ref)
            else:
                removed = self.credentials.invalidate(ref)
        logger.info("로그아웃: %s (%s)", ref, "삭제됨" if removed else "자격 증명 없음")
        return account, removed

    # =========================================================================
    # 내부
    # =========================================================================

    def _ensure(self, profile: ConnectionProfile, account: Account) -> Credential:
        ref = account.credential_ref
        with self._lock_for(ref):
            existing = self.credentials.find(ref)
            if existing is not None and self.credentials.is_valid(existing, self.now()):
                logger.debug("캐시된 자격 증명 사용: %s", ref)
                return existing

            if not account.auth_method.uses_session_token:
                return self._api_key(profile, account, existing)

            previous = existing if isinstance(existing, SessionToken) else None
            return self._obtain(profile, account, previous)

    def _api_key(
        self,
        profile: ConnectionProfile,
        account: Account,
        existing: Credential | None,
    ) -> ApiKeyCredential:
        if isinstance(existing, ApiKeyCredential):
            return existing
        try:
            self.provider_for(AuthMethod.API_KEY).login(self.http, profile, account)
        except AuthenticationFailedError as e:
            raise e.with_context(profile.name, account.account_id)
        raise AuthenticationFailedError("API 키를 확보하지 못했습니다").with_context(profile.name, account.account_id)

    def _obtain(
        self,
        profile: ConnectionProfile,
        account: Account,
        previous: SessionToken | None,
    ) -> SessionToken:
        """refresh 또는 전체 로그인으로 새 세션 토큰 확보 후 저장 (잠금 보유 상태에서 호출)"""
        ref = account.credential_ref
        provider = self.provider_for(account.auth_method)

        try:
            token: SessionToken | None = None
            if previous is not None and self.credentials.can_refresh(previous, self.now()):
                try:
                    token = provider.refresh(self.http, profile, account, previous)
                except AuthenticationFailedError as e:
                    logger.info("세션 갱신이 거부되어 다시 로그인합니다 (%s): %s", ref, e.message)
                    self.credentials.invalidate(ref)
            if token is None:
                token = provider.login(self.http, profile, account)
        except AuthenticationFailedError as e:
            self.credentials.invalidate(ref)
            raise e.with_context(profile.name, account.account_id)
        except ConnectionUnavailableError as e:
            raise e.with_context(profile.name, account.account_id)

        self.credentials.put(ref, token)
        logger.info("세션 확보: %s (%d초 유효)", ref, token.remaining_seconds(self.now()))
        return token
