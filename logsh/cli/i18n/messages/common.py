"""
logsh/cli/i18n/messages/common.py - Common Messages

Shared labels, prompts and error rendering.
"""

from __future__ import annotations

COMMON_MESSAGES = {
    # =========================================================================
    # Status
    # =========================================================================
    "cancelled": {
        "ko": "취소되었습니다",
        "en": "Cancelled",
    },
    "error_label": {
        "ko": "오류: {message}",
        "en": "Error: {message}",
    },
    "save_failed": {
        "ko": "설정 저장 실패: {message}",
        "en": "Failed to save configuration: {message}",
    },
    "yes": {
        "ko": "예",
        "en": "yes",
    },
    # =========================================================================
    # Prompts
    # =========================================================================
    "prompt_password": {
        "ko": "{username}@{connection} 비밀번호:",
        "en": "Password for {username}@{connection}:",
    },
    "prompt_api_key": {
        "ko": "API 키:",
        "en": "API key:",
    },
    "device_code_title": {
        "ko": "디바이스 로그인",
        "en": "Device Login",
    },
    "device_code_open": {
        "ko": "브라우저에서 다음 URL을 여세요: {url}",
        "en": "Open this URL in your browser: {url}",
    },
    "device_code_enter": {
        "ko": "다음 코드를 입력하세요: {code}",
        "en": "Enter the following code: {code}",
    },
    "device_code_waiting": {
        "ko": "인증 완료를 기다리는 중...",
        "en": "Waiting for authorization...",
    },
    # =========================================================================
    # Credential status
    # =========================================================================
    "cred_api_key": {
        "ko": "API 키",
        "en": "API key",
    },
    "cred_valid": {
        "ko": "유효 ({minutes}분 남음)",
        "en": "valid ({minutes}m left)",
    },
    "cred_refreshable": {
        "ko": "만료 (갱신 가능)",
        "en": "expired (refreshable)",
    },
    "cred_expired": {
        "ko": "만료",
        "en": "expired",
    },
    "cred_none": {
        "ko": "없음",
        "en": "none",
    },
}
