# logsh/cli/commands - click 명령 정의
"""
CLI 명령 모듈

각 모듈은 click 그룹 또는 명령을 정의하며, cli.app에서 등록합니다.
"""

from .account import account_group
from .config_cmd import config_group
from .connection import connection_group
from .platform import query_command, upload_command, whoami_command

__all__ = [
    "account_group",
    "config_group",
    "connection_group",
    "query_command",
    "upload_command",
    "whoami_command",
]
