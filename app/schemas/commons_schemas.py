"""
공통 스키마 - 여러 API에서 공유하는 스키마들
"""

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from typing import Any, Optional, Type, TypeVar

from app.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_fields(model: Type[ModelT], **data) -> ModelT:
    """폼 필드 검증 - 실패시 400용 ValidationError"""
    try:
        return model(**data)
    except PydanticValidationError as e:
        messages = []
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            messages.append(f"{field}: {error['msg']}")
        raise ValidationError("; ".join(messages))


class CamelModel(BaseModel):
    """응답 키를 camelCase로 직렬화"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# 기본 응답 스키마 {success, message?, data?}
class ApiResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
