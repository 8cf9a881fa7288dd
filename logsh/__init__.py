# logsh/__init__.py
"""
logsh - 로그 플랫폼 CLI

커넥션(서버 엔드포인트)과 계정을 로컬 레지스트리에 등록하고,
활성 계정의 자격 증명으로 플랫폼 API를 호출합니다.

아키텍처:
    logsh/
    ├── registry/       # 커넥션/계정 레지스트리와 파일 영속화
    ├── auth/           # 자격 증명 저장소, 인증 방식별 Provider, 세션 관리
    ├── dispatch/       # 인증된 HTTP 요청 실행, 에러 분류, 재시도
    ├── cli/            # click 명령, rich 출력, i18n
    ├── client.py       # 플랫폼 엔드포인트 클라이언트 (whoami, query, upload)
    ├── config.py       # 중앙 설정 관리
    └── exceptions.py   # 통합 예외 계층

Usage:
    from logsh.registry import RegistryStore
    from logsh.auth import SessionManager

    registry = RegistryStore().load()
    context = SessionManager(registry).acquire_context()
"""

from logsh.config import VERSION

__version__ = VERSION

__all__ = ["__version__"]
