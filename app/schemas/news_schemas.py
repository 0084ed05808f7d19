# app/schemas/news_schemas.py
"""
뉴스 / 댓글 스키마
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator

from .commons_schemas import CamelModel


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class NewsFields(BaseModel):
    title: str
    description: str
    read_time: Optional[str] = None
    tag: Optional[str] = None
    quotes: Optional[str] = None

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _strip_required(value)


class NewsUpdateFields(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    read_time: Optional[str] = None
    tag: Optional[str] = None
    quotes: Optional[str] = None

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _strip_required(value)


class NewsResponse(CamelModel):
    id: int
    title: str
    description: str
    image: Optional[str] = None
    author: str
    read_time: Optional[str] = None
    tag: Optional[str] = None
    quotes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentCreate(BaseModel):
    name: str
    email: str
    content: str

    @field_validator("name", "email", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _strip_required(value)


class StaffCommentCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _strip_required(value)


class CommentUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    content: Optional[str] = None


class CommentResponse(CamelModel):
    id: int
    news_id: int
    name: str
    email: str
    content: str
    created_at: Optional[datetime] = None
