# app/schemas/letter_schemas.py

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, field_validator

from .commons_schemas import CamelModel

LetterType = Literal["Meeting", "Announcement", "Warning"]


# selected_csos 컬럼의 원소 (정규형)
class RecipientState(BaseModel):
    id: int
    read: bool = False
    read_at: Optional[datetime] = None

    def to_storage(self) -> dict:
        return {
            "id": self.id,
            "read": 1 if self.read else 0,
            "read_at": self.read_at.isoformat() if self.read_at else None
        }


class RecipientSummary(CamelModel):
    items: List[RecipientState] = []
    read_count: int = 0
    total_count: int = 0
    unread_count: int = 0


# 생성 요청 필드 (multipart form -> 검증)
class LetterFields(BaseModel):
    title: str
    summary: str
    type: LetterType
    send_to_all: bool = False

    @field_validator("title", "summary")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


# 수정 요청 필드 - 전달된 값만 반영
class LetterUpdateFields(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    type: Optional[LetterType] = None
    send_to_all: Optional[bool] = None

    @field_validator("title", "summary")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class LetterResponse(CamelModel):
    id: int
    title: str
    summary: str
    type: str
    send_to_all: bool
    selected_csos: List[RecipientState] = []
    recipients: RecipientSummary
    attachment_path: Optional[str] = None
    attachment_name: Optional[str] = None
    attachment_mimetype: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# CSO 입장에서 본 레터
class CsoLetterResponse(CamelModel):
    id: int
    title: str
    summary: str
    type: str
    send_to_all: bool
    attachment_path: Optional[str] = None
    attachment_name: Optional[str] = None
    attachment_mimetype: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    is_read: bool = False
    read_at: Optional[datetime] = None


class UnreadCountResponse(CamelModel):
    cso_id: int
    unread_count: int
