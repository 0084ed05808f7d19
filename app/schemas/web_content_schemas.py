# app/schemas/web_content_schemas.py
"""
히어로 슬라이드 / 소개 / 연락처 스키마
"""

import json
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, field_validator

from .commons_schemas import CamelModel
from .news_schemas import _strip_required


def _json_list(value) -> List[str]:
    """JSON 배열 텍스트 컬럼 -> 리스트 (깨진 값은 빈 리스트)"""
    if value is None or isinstance(value, list):
        return value or []
    try:
        parsed = json.loads(value)
    except (ValueError, RecursionError):
        return []
    if isinstance(parsed, str):
        return [parsed]
    if not isinstance(parsed, list):
        return []
    return [str(item) for item in parsed if item is not None]


# 히어로 슬라이드
class HeroFields(BaseModel):
    title: str
    subtitle: Optional[str] = None

    @field_validator("title")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _strip_required(value)


class HeroUpdateFields(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None

    @field_validator("title")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _strip_required(value)


class HeroSlideResponse(CamelModel):
    id: int
    image_url: str
    title: str
    subtitle: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# 소개
class AboutFields(BaseModel):
    introduction: str
    mission: str
    vision: str
    purpose: str
    core_values: List[str] = []

    @field_validator("introduction", "mission", "vision", "purpose")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _strip_required(value)


class AboutResponse(CamelModel):
    id: int
    introduction: str
    mission: str
    vision: str
    purpose: str
    core_values: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("core_values", mode="before")
    @classmethod
    def decode_list(cls, value):
        return _json_list(value)


# 연락처
class ContactFields(BaseModel):
    page_title: str
    description: Optional[str] = None
    email: List[str] = []
    phone: List[str] = []
    location: Optional[str] = None
    address: Optional[str] = None
    map_embed_url: Optional[str] = None
    image_url: Optional[str] = None
    facebook_link: Optional[str] = None

    @field_validator("page_title")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _strip_required(value)


class ContactResponse(CamelModel):
    id: int
    page_title: str
    description: Optional[str] = None
    email: List[str] = []
    phone: List[str] = []
    location: Optional[str] = None
    address: Optional[str] = None
    map_embed_url: Optional[str] = None
    image_url: Optional[str] = None
    facebook_link: Optional[str] = None
    updated_at: Optional[datetime] = None

    @field_validator("email", "phone", mode="before")
    @classmethod
    def decode_list(cls, value):
        return _json_list(value)


class ContactMessage(BaseModel):
    """문의 폼 - 관리자 메일로 전달"""
    name: str
    email: str
    message: str
    phone: Optional[str] = None
    subject: Optional[str] = None

    @field_validator("name", "email", "message")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _strip_required(value)
