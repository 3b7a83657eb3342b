import hashlib
import logging

from .database import engine, SessionLocal, Base
from .models import *

logger = logging.getLogger(__name__)

def initialize_db(bind=engine, session_factory=SessionLocal):
    """
    DB와 테이블을 생성하고, 기본 관리자 계정을 삽입합니다.
    SQLAlchemy 모델을 사용하여 모든 작업을 수행합니다.
    """
    logger.info("DB 초기화 중 (SQLAlchemy 사용)...")

    # 모든 테이블을 생성합니다. (이미 존재하면 생성하지 않음)
    Base.metadata.create_all(bind=bind)

    db = session_factory()
    try:
        if db.query(User).first():
            logger.info("기본 데이터가 이미 존재합니다. 초기화를 건너뜁니다.")
            return

        password_hash = hashlib.sha256("admin".encode('utf-8')).hexdigest()
        admin_user = User(
            name='Administrator',
            email='admin@taskboard.local',
            password_hash=password_hash,
            role=UserRole.ADMIN,
        )
        db.add(admin_user)
        db.commit()
        logger.info("DB 초기화 및 기본 관리자 계정 생성 완료.")

    except Exception:
        logger.exception("DB 초기화 중 오류 발생")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    initialize_db()
