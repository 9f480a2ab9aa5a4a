import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from employee_directory.core.config import Settings

logger = logging.getLogger(__name__)

# Base 클래스 (모든 모델의 부모)
Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    """
    설정값으로 Async Engine 생성.
    필수 접속 정보가 없으면 ConfigurationError가 그대로 올라간다.
    """
    return create_async_engine(
        settings.database_url(),
        echo=settings.SQLALCHEMY_ECHO,
        pool_pre_ping=True,
        future=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
        class_=AsyncSession,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    애플리케이션 시작 시 한 번 호출해서 employees 테이블과 인덱스를 생성.
    이미 있으면 아무 일도 안 함.
    """
    # 모델 import가 되어 있어야 metadata에 테이블이 등록됨
    from employee_directory.models import employee  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema is ready")
