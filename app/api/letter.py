# app/api/letter.py

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import CurrentUser, get_current_user
from app.exceptions import ForbiddenError
from app.config import settings
from app.models.base import get_async_session
from app.schemas.commons_schemas import ApiResponse, parse_fields
from app.schemas.letter_schemas import LetterFields, LetterUpdateFields, UnreadCountResponse
from app.services.attachment_service import read_upload
from app.services.letter_service import LetterService
from app.services.read_state_service import ReadStateService
from app.utils.logger import logger

router = APIRouter(prefix="/letters", tags=["letter"])


def get_letter_service(
    request: Request,
    session: AsyncSession = Depends(get_async_session)
) -> LetterService:
    return LetterService(session, request.app.state.letter_attachments, settings.track_broadcast_reads)


def get_read_state_service(session: AsyncSession = Depends(get_async_session)) -> ReadStateService:
    return ReadStateService(session, settings.track_broadcast_reads)


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.strip().lower() in ("true", "1", "yes", "on")


def _require_cso_access(user: CurrentUser, cso_id: int):
    """CSO 토큰은 자기 id에 대해서만 조회/열람 처리 가능 (staff는 제한 없음)"""
    if user.role == "cso" and user.id != str(cso_id):
        raise ForbiddenError("Access denied for this CSO")


@router.post("/submit", response_model=ApiResponse, status_code=201)
async def create_letter(
    title: Optional[str] = Form(None),
    summary: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    send_to_all: Optional[str] = Form(None, alias="sendToAll"),
    selected_csos: Optional[str] = Form(None, alias="selectedCsos"),
    attachment: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    service: LetterService = Depends(get_letter_service)
):
    """레터 생성 (multipart)"""
    logger.info(f" 레터 생성 요청: title={title!r}, user={user.id}")
    fields = parse_fields(
        LetterFields,
        title=title,
        summary=summary,
        type=type,
        send_to_all=bool(_parse_bool(send_to_all))
    )
    upload = await read_upload(attachment, service.attachments.max_size)
    letter = await service.create(fields, selected_csos, upload, user.id)
    return ApiResponse(message="Letter created successfully", data=letter.to_response())


@router.get("/", response_model=ApiResponse)
async def get_all_letters(service: LetterService = Depends(get_letter_service)):
    letters = await service.list_all()
    return ApiResponse(data=[letter.to_response() for letter in letters])


@router.get("/get/{letter_id}", response_model=ApiResponse)
async def get_letter(letter_id: int, service: LetterService = Depends(get_letter_service)):
    letter = await service.get_by_id(letter_id)
    return ApiResponse(data=letter.to_response())


@router.put("/{letter_id}", response_model=ApiResponse)
async def update_letter(
    letter_id: int,
    title: Optional[str] = Form(None),
    summary: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    send_to_all: Optional[str] = Form(None, alias="sendToAll"),
    selected_csos: Optional[str] = Form(None, alias="selectedCsos"),
    attachment: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    service: LetterService = Depends(get_letter_service)
):
    """레터 수정 - 전달된 필드만 반영"""
    logger.info(f" 레터 수정 요청: id={letter_id}, user={user.id}")
    fields = parse_fields(
        LetterUpdateFields,
        title=title,
        summary=summary,
        type=type,
        send_to_all=_parse_bool(send_to_all)
    )
    upload = await read_upload(attachment, service.attachments.max_size)
    letter = await service.update(letter_id, fields, selected_csos, upload)
    return ApiResponse(message="Letter updated successfully", data=letter.to_response())


@router.delete("/{letter_id}", response_model=ApiResponse)
async def delete_letter(
    letter_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: LetterService = Depends(get_letter_service)
):
    logger.info(f"🗑️ 레터 삭제 요청: id={letter_id}, user={user.id}")
    await service.delete(letter_id)
    return ApiResponse(message="Letter deleted successfully")


@router.get("/cso/{cso_id}", response_model=ApiResponse)
async def get_letters_by_cso(
    cso_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: LetterService = Depends(get_letter_service)
):
    """CSO가 볼 수 있는 레터 (전체 발송 + 지정 발송)"""
    _require_cso_access(user, cso_id)
    letters = await service.list_for_recipient(cso_id)
    return ApiResponse(data=[letter.to_response() for letter in letters])


@router.put("/{letter_id}/mark-read/{cso_id}", response_model=ApiResponse)
async def mark_letter_read(
    letter_id: int,
    cso_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: ReadStateService = Depends(get_read_state_service)
):
    _require_cso_access(user, cso_id)
    state = await service.mark_read(letter_id, cso_id)
    if state is None:
        return ApiResponse(message="Read receipts are not tracked for letters sent to all")
    return ApiResponse(message="Letter marked as read", data=state.model_dump(mode="json"))


@router.get("/cso/{cso_id}/unread-count", response_model=ApiResponse)
async def get_unread_count(
    cso_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: ReadStateService = Depends(get_read_state_service)
):
    _require_cso_access(user, cso_id)
    unread_count = await service.get_unread_count(cso_id)
    return ApiResponse(data=UnreadCountResponse(cso_id=cso_id, unread_count=unread_count).to_response())
