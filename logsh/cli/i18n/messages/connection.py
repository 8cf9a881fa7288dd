"""
logsh/cli/i18n/messages/connection.py - Connection Command Messages
"""

from __future__ import annotations

CONNECTION_MESSAGES = {
    "added": {
        "ko": "커넥션 추가: {name} ({endpoint})",
        "en": "Connection added: {name} ({endpoint})",
    },
    "removed": {
        "ko": "커넥션 삭제: {name}",
        "en": "Connection removed: {name}",
    },
    "removed_was_default": {
        "ko": "기본 커넥션이 삭제되었습니다. 'logsh connection default NAME'으로 새 기본값을 지정하세요",
        "en": "The default connection was removed. Set a new one with 'logsh connection default NAME'",
    },
    "default_set": {
        "ko": "기본 커넥션: {name}",
        "en": "Default connection: {name}",
    },
    "insecure_warning": {
        "ko": "TLS 인증서 검증을 하지 않습니다: {name}",
        "en": "TLS certificate verification is disabled for {name}",
    },
    "none_registered": {
        "ko": "등록된 커넥션이 없습니다",
        "en": "No connections registered",
    },
    "add_hint": {
        "ko": "'logsh connection add NAME ENDPOINT'로 추가하세요",
        "en": "Add one with 'logsh connection add NAME ENDPOINT'",
    },
    "list_title": {
        "ko": "커넥션",
        "en": "Connections",
    },
    "col_name": {
        "ko": "이름",
        "en": "Name",
    },
    "col_endpoint": {
        "ko": "엔드포인트",
        "en": "Endpoint",
    },
    "col_accounts": {
        "ko": "계정",
        "en": "Accounts",
    },
    "logged_in": {
        "ko": "로그인 완료: {context} ({minutes}분 유효)",
        "en": "Logged in: {context} (valid for {minutes}m)",
    },
    "api_key_ready": {
        "ko": "API 키가 등록되어 있습니다: {context}",
        "en": "API key is registered: {context}",
    },
    "logged_out": {
        "ko": "로그아웃: {context}",
        "en": "Logged out: {context}",
    },
    "nothing_to_logout": {
        "ko": "저장된 자격 증명이 없습니다: {context}",
        "en": "No stored credential: {context}",
    },
}
