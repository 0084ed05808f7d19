"""
SQLAlchemy Base 설정 및 DB 연결 관리
"""

from typing import AsyncGenerator, Optional
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from app.utils.logger import logger

# Base 모델
Base = declarative_base()


class Database:
    """엔진/세션 팩토리 보관 - 앱 시작시 init(), 종료시 close()"""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    def init(self):
        if self.engine is not None:
            return
        options = {"echo": self.echo}
        if self.url.startswith("mysql"):
            options.update(pool_pre_ping=True, pool_recycle=3600)
        self.engine = create_async_engine(self.url, **options)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        logger.info(" Database 초기화 완료")

    async def create_tables(self):
        """테이블 생성 (초기 설정용)"""
        self.init()
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info(" 데이터베이스 테이블 생성 완료")
        except Exception as e:
            logger.error(f" 테이블 생성 실패: {e}")
            raise

    def session(self) -> AsyncSession:
        if self.session_factory is None:
            raise RuntimeError("Database.init() has not been called")
        return self.session_factory()

    async def close(self):
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info("🔌 데이터베이스 연결 종료")


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 비동기 세션 제공"""
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
