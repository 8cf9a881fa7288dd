"""
logsh/cli/i18n/messages/account.py - Account Command Messages
"""

from __future__ import annotations

ACCOUNT_MESSAGES = {
    "added": {
        "ko": "계정 추가: {connection}/{account} ({method})",
        "en": "Account added: {connection}/{account} ({method})",
    },
    "removed": {
        "ko": "계정 삭제: {connection}/{account}",
        "en": "Account removed: {connection}/{account}",
    },
    "remote_deleted": {
        "ko": "서버에서 계정 삭제: {account} ({connection})",
        "en": "Account deleted on server: {account} ({connection})",
    },
    "default_set": {
        "ko": "기본 계정: {connection}/{account}",
        "en": "Default account: {connection}/{account}",
    },
    "none_registered": {
        "ko": "커넥션 '{connection}'에 등록된 계정이 없습니다",
        "en": "No accounts registered for connection '{connection}'",
    },
    "add_hint": {
        "ko": "'logsh account add ACCOUNT_ID --auth api-key'로 추가하세요",
        "en": "Add one with 'logsh account add ACCOUNT_ID --auth api-key'",
    },
    "list_title": {
        "ko": "계정 ({connection})",
        "en": "Accounts ({connection})",
    },
    "remote_title": {
        "ko": "원격 계정 ({connection})",
        "en": "Remote accounts ({connection})",
    },
    "remote_none": {
        "ko": "접근 가능한 원격 계정이 없습니다",
        "en": "No remote accounts available",
    },
    "col_id": {
        "ko": "계정 ID",
        "en": "Account ID",
    },
    "col_label": {
        "ko": "라벨",
        "en": "Label",
    },
    "col_auth": {
        "ko": "인증",
        "en": "Auth",
    },
    "col_username": {
        "ko": "사용자",
        "en": "User",
    },
    "col_credential": {
        "ko": "자격 증명",
        "en": "Credential",
    },
    "col_name": {
        "ko": "이름",
        "en": "Name",
    },
    "col_permissions": {
        "ko": "권한",
        "en": "Permissions",
    },
    "col_registered": {
        "ko": "등록됨",
        "en": "Registered",
    },
}
