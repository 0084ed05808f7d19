# app/models/letter.py
"""
레터(공문) 모델
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy import Enum as SQLEnum
from datetime import datetime
from .base import Base

LETTER_TYPES = ("Meeting", "Announcement", "Warning")

class Letter(Base):
    __tablename__ = "letters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    summary = Column(Text, nullable=False)
    type = Column(SQLEnum(*LETTER_TYPES, name="letter_type"), nullable=False)
    attachment_path = Column(String(255))
    attachment_name = Column(String(255))
    attachment_mimetype = Column(String(100))
    send_to_all = Column(Boolean, default=False, nullable=False)
    # NULL 또는 [{"id": .., "read": 0|1, "read_at": ..}] JSON 텍스트
    selected_csos = Column(Text)
    created_by = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
