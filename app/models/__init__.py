"""
Models 패키지
SQLAlchemy 모델들과 DB 연결 설정
"""

from .base import Base, Database, get_async_session
from .letter import Letter, LETTER_TYPES
from .staff import Staff
from .news import News, NewsComment
from .web_content import HeroSlide, AboutSection, ContactContent

__all__ = [
    "Base",
    "Database",
    "get_async_session",
    "Letter",
    "LETTER_TYPES",
    "Staff",
    "News",
    "NewsComment",
    "HeroSlide",
    "AboutSection",
    "ContactContent"
]
