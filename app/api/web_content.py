# app/api/web_content.py
"""
홈페이지 콘텐츠 API - 히어로 슬라이드 / 소개 / 연락처
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import CurrentUser, get_current_user
from app.config import settings
from app.models.base import get_async_session
from app.schemas.commons_schemas import ApiResponse, parse_fields
from app.schemas.web_content_schemas import (
    AboutFields,
    ContactFields,
    ContactMessage,
    HeroFields,
    HeroUpdateFields,
)
from app.services.attachment_service import read_upload
from app.services.web_content_service import AboutService, ContactService, HeroService
from app.utils.logger import logger

hero_router = APIRouter(prefix="/hero", tags=["hero"])
about_router = APIRouter(prefix="/about", tags=["about"])
contact_router = APIRouter(prefix="/contact", tags=["contact"])


def get_hero_service(
    request: Request,
    session: AsyncSession = Depends(get_async_session)
) -> HeroService:
    return HeroService(session, request.app.state.hero_images)


def get_about_service(session: AsyncSession = Depends(get_async_session)) -> AboutService:
    return AboutService(session)


def get_contact_service(session: AsyncSession = Depends(get_async_session)) -> ContactService:
    return ContactService(session, settings)


# 히어로 슬라이드
@hero_router.get("/", response_model=ApiResponse)
async def get_slides(service: HeroService = Depends(get_hero_service)):
    slides = await service.list_all()
    return ApiResponse(data=[slide.to_response() for slide in slides])


@hero_router.get("/{slide_id}", response_model=ApiResponse)
async def get_slide(slide_id: int, service: HeroService = Depends(get_hero_service)):
    slide = await service.get_by_id(slide_id)
    return ApiResponse(data=slide.to_response())


@hero_router.post("/", response_model=ApiResponse, status_code=201)
async def create_slide(
    title: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    service: HeroService = Depends(get_hero_service)
):
    logger.info(f" 히어로 슬라이드 생성 요청: title={title!r}, user={user.id}")
    fields = parse_fields(HeroFields, title=title, subtitle=subtitle)
    upload = await read_upload(image, service.images.max_size)
    slide = await service.create(fields, upload)
    return ApiResponse(data=slide.to_response())


@hero_router.put("/{slide_id}", response_model=ApiResponse)
async def update_slide(
    slide_id: int,
    title: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    service: HeroService = Depends(get_hero_service)
):
    fields = parse_fields(HeroUpdateFields, title=title, subtitle=subtitle)
    upload = await read_upload(image, service.images.max_size)
    slide = await service.update(slide_id, fields, upload)
    return ApiResponse(data=slide.to_response())


@hero_router.delete("/{slide_id}", response_model=ApiResponse)
async def delete_slide(
    slide_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: HeroService = Depends(get_hero_service)
):
    logger.info(f"🗑️ 히어로 슬라이드 삭제 요청: id={slide_id}, user={user.id}")
    await service.delete(slide_id)
    return ApiResponse(message="Slide deleted successfully")


# 소개
@about_router.get("/", response_model=ApiResponse)
async def get_about(service: AboutService = Depends(get_about_service)):
    section = await service.get()
    return ApiResponse(data=section.to_response())


@about_router.post("/", response_model=ApiResponse, status_code=201)
async def create_about(
    payload: dict = Body(...),
    user: CurrentUser = Depends(get_current_user),
    service: AboutService = Depends(get_about_service)
):
    section = await service.create(parse_fields(AboutFields, **payload))
    return ApiResponse(data=section.to_response())


@about_router.put("/{section_id}", response_model=ApiResponse)
async def update_about(
    section_id: int,
    payload: dict = Body(...),
    user: CurrentUser = Depends(get_current_user),
    service: AboutService = Depends(get_about_service)
):
    section = await service.update(section_id, parse_fields(AboutFields, **payload))
    return ApiResponse(data=section.to_response())


@about_router.delete("/{section_id}", response_model=ApiResponse)
async def delete_about(
    section_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: AboutService = Depends(get_about_service)
):
    await service.delete(section_id)
    return ApiResponse(message="About section deleted successfully")


# 연락처
@contact_router.post("/create", response_model=ApiResponse)
async def send_contact_message(
    payload: dict = Body(...),
    service: ContactService = Depends(get_contact_service)
):
    """문의 폼 (로그인 불필요)"""
    await service.send_message(parse_fields(ContactMessage, **payload))
    return ApiResponse(message="Message sent successfully!")


@contact_router.get("/contact", response_model=ApiResponse)
async def get_contact(service: ContactService = Depends(get_contact_service)):
    contact = await service.get()
    return ApiResponse(data=contact.to_response())


@contact_router.put("/contentInfo", response_model=ApiResponse)
async def save_contact(
    payload: dict = Body(...),
    user: CurrentUser = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service)
):
    contact, created = await service.save(parse_fields(ContactFields, **payload))
    message = "Contact info created" if created else "Contact info updated"
    return ApiResponse(message=message, data=contact.to_response())


@contact_router.delete("/contentInfo", response_model=ApiResponse)
async def delete_contact(
    user: CurrentUser = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service)
):
    await service.delete_all()
    return ApiResponse(message="All contact info deleted")
