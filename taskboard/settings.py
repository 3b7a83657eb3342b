"""
환경 변수 기반 설정 모듈.

설정값은 import 시점이 아니라 호출 시점에 읽습니다.
(테스트에서 monkeypatch로 환경 변수를 바꿀 수 있도록)
"""

import os
from typing import Any, Dict


def get_settings() -> Dict[str, Any]:
    """
    환경 변수에서 애플리케이션 설정을 읽어 딕셔너리로 반환합니다.

    Returns:
        다음 키를 가진 딕셔너리:
            - database_url: SQLAlchemy 연결 문자열 (기본값: sqlite:///taskboard.db)
            - token_ttl_minutes: 인증 토큰 유효 시간(분) (기본값: 60)
            - port: WSGI 서버 포트 (기본값: 8000)
            - log_level: 로깅 레벨 이름 (기본값: INFO)
            - max_active_tasks: 한 사용자가 동시에 맡을 수 있는 진행 중 작업 수 (기본값: 10)
    """
    return {
        "database_url": os.getenv("TASKBOARD_DATABASE_URL", "sqlite:///taskboard.db"),
        "token_ttl_minutes": int(os.getenv("TASKBOARD_TOKEN_TTL_MINUTES", "60")),
        "port": int(os.getenv("TASKBOARD_PORT", "8000")),
        "log_level": os.getenv("TASKBOARD_LOG_LEVEL", "INFO").upper(),
        "max_active_tasks": int(os.getenv("TASKBOARD_MAX_ACTIVE_TASKS", "10")),
    }
