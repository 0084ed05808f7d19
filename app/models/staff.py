"""
직원 모델 (이 서비스에서는 읽기 전용)
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Optional
from .base import Base

class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    position = Column(String(100))
    created_at = Column(DateTime, default=datetime.utcnow)

    @classmethod
    async def get_by_id(cls, session: AsyncSession, staff_id) -> Optional["Staff"]:
        """직원 ID로 조회 (숫자가 아닌 ID는 None)"""
        try:
            staff_id = int(staff_id)
        except (TypeError, ValueError):
            return None
        result = await session.execute(select(cls).where(cls.id == staff_id))
        return result.scalar_one_or_none()
