"""
logsh/registry/models.py - 커넥션/계정 데이터 모델

- ConnectionProfile: 이름이 붙은 서버 엔드포인트 (계정들을 소유)
- Account: 커넥션에 속한 원격 플랫폼 계정 (인증 방식 + 자격 증명 참조)
- validate_endpoint: 엔드포인트 URL 검증/정규화
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from logsh.auth.types import AuthMethod
from logsh.exceptions import InvalidEndpointError

SUPPORTED_SCHEMES = ("http", "https")

# 자격 증명 키 구분자 (커넥션 이름과 계정 ID에 사용할 수 없음)
REF_SEPARATOR = "/"


def validate_endpoint(endpoint: str) -> str:
    """엔드포인트 URL을 검증하고 정규화된 값을 반환

    앞뒤 공백과 끝의 '/'를 제거합니다.

    Raises:
        InvalidEndpointError: 파싱 실패, scheme/host 누락, 지원하지 않는 scheme
    """
    value = (endpoint or "").strip()
    if not value:
        raise InvalidEndpointError(endpoint, "빈 값")

    try:
        parts = urlsplit(value)
        # 포트 파싱 오류는 속성 접근 시점에 발생
        _ = parts.port
    except ValueError as e:
        raise InvalidEndpointError(endpoint, f"URL 파싱 실패 ({e})") from e

    if not parts.scheme:
        raise InvalidEndpointError(endpoint, "scheme이 필요합니다 (예: https://)")
    if parts.scheme.lower() not in SUPPORTED_SCHEMES:
        raise InvalidEndpointError(endpoint, f"지원하지 않는 scheme: {parts.scheme}")
    if not parts.hostname:
        raise InvalidEndpointError(endpoint, "호스트가 없습니다")

    return value.rstrip("/")


@dataclass
class Account:
    """커넥션에 속한 계정

    Attributes:
        account_id: 원격 플랫폼이 발급한 계정 ID (로그인 간 불변)
        label: 사용자가 붙인 이름
        auth_method: 인증 방식
        connection: 소유 커넥션 이름
        username: 비밀번호 인증용 사용자 이름
        is_default: 커넥션 내 기본 계정 여부
    """

    account_id: str
    label: str
    auth_method: AuthMethod
    connection: str
    username: str | None = None
    is_default: bool = False

    @property
    def credential_ref(self) -> str:
        """자격 증명 저장소 키"""
        return f"{self.connection}{REF_SEPARATOR}{self.account_id}"

    @property
    def display_name(self) -> str:
        if self.label and self.label != self.account_id:
            return f"{self.label} ({self.account_id})"
        return self.account_id

    def matches(self, ref: str) -> bool:
        """계정 ID 또는 라벨 일치 여부"""
        return ref in (self.account_id, self.label)

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "auth_method": self.auth_method.value,
            "username": self.username,
        }


@dataclass
class ConnectionProfile:
    """이름이 붙은 서버 엔드포인트

    Attributes:
        name: 고유 이름 (대소문자 구분)
        endpoint: 절대 base URL
        insecure_skip_verify: TLS 인증서 검증 생략 여부
        is_default: 프로세스 전역 기본 커넥션 여부
        accounts: {account_id: Account} (이 커넥션이 소유)
        added_at: 추가 시각 (ISO format, 알 수 없으면 빈 문자열)
    """

    name: str
    endpoint: str
    insecure_skip_verify: bool = False
    is_default: bool = False
    accounts: dict[str, Account] = field(default_factory=dict)
    added_at: str = ""

    @property
    def default_account(self) -> Account | None:
        for account in self.accounts.values():
            if account.is_default:
                return account
        return None

    def find_account(self, ref: str) -> Account | None:
        """계정 ID 우선, 없으면 라벨로 찾기"""
        account = self.accounts.get(ref)
        if account is not None:
            return account
        for account in self.accounts.values():
            if account.label == ref:
                return account
        return None

    def to_dict(self) -> dict[str, Any]:
        default = self.default_account
        data: dict[str, Any] = {
            "endpoint": self.endpoint,
            "insecure_skip_verify": self.insecure_skip_verify,
            "default_account": default.account_id if default else None,
            "accounts": {account_id: account.to_dict() for account_id, account in sorted(self.accounts.items())},
        }
        # 추가 시각을 모르는 항목은 필드 없이 저장
        if self.added_at:
            data["added_at"] = self.added_at
        return data
