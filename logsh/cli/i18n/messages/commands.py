"""
logsh/cli/i18n/messages/commands.py - Platform / Config Command Messages

whoami, query, upload, config
"""

from __future__ import annotations

COMMAND_MESSAGES = {
    # =========================================================================
    # whoami
    # =========================================================================
    "whoami": {
        "ko": "{user_name} (ID: {user_id}) @ {context}",
        "en": "{user_name} (ID: {user_id}) @ {context}",
    },
    # =========================================================================
    # query
    # =========================================================================
    "query_rows": {
        "ko": "{count}행",
        "en": "{count} rows",
    },
    "query_empty": {
        "ko": "결과가 없습니다",
        "en": "No results",
    },
    # =========================================================================
    # upload
    # =========================================================================
    "upload_done": {
        "ko": "{count}건 업로드 완료: {schema} → {context}",
        "en": "Uploaded {count} records: {schema} → {context}",
    },
    "upload_bad_json": {
        "ko": "{line}번째 줄을 JSON으로 해석할 수 없습니다",
        "en": "Line {line} is not valid JSON",
    },
    "upload_not_array": {
        "ko": "JSON 배열 또는 JSON Lines 형식이어야 합니다",
        "en": "Input must be a JSON array or JSON Lines",
    },
    # =========================================================================
    # config
    # =========================================================================
    "config_missing": {
        "ko": "설정 파일이 없습니다: {path}",
        "en": "Configuration file does not exist: {path}",
    },
    "config_valid": {
        "ko": "설정 파일이 올바릅니다: 커넥션 {connections}개, 계정 {accounts}개",
        "en": "Configuration is valid: {connections} connections, {accounts} accounts",
    },
}
