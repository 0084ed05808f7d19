"""
웹 콘텐츠 모델 - 메인 히어로 슬라이드, 소개(About), 연락처 페이지
"""

from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime
from .base import Base

class HeroSlide(Base):
    __tablename__ = "hero_slides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # "hero/<파일명>" (예전 데이터는 파일명만 저장)
    image_url = Column(String(255), nullable=False)
    title = Column(String(255), nullable=False)
    subtitle = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AboutSection(Base):
    __tablename__ = "about_us"

    id = Column(Integer, primary_key=True, autoincrement=True)
    introduction = Column(Text, nullable=False)
    mission = Column(Text, nullable=False)
    vision = Column(Text, nullable=False)
    purpose = Column(Text, nullable=False)
    # JSON 배열 텍스트
    core_values = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ContactContent(Base):
    """연락처 페이지 - 항상 한 행만 유지"""
    __tablename__ = "contact_content"

    id = Column(Integer, primary_key=True, autoincrement=True)
    page_title = Column(String(255), nullable=False)
    description = Column(Text)
    # 이메일/전화번호 목록은 JSON 배열 텍스트
    email = Column(Text)
    phone = Column(Text)
    location = Column(String(255))
    address = Column(String(255))
    map_embed_url = Column(Text)
    image_url = Column(Text)
    facebook_link = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
