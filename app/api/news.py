# app/api/news.py

from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import CurrentUser, get_current_user
from app.models.base import get_async_session
from app.schemas.commons_schemas import ApiResponse, parse_fields
from app.schemas.news_schemas import (
    CommentCreate,
    CommentUpdate,
    NewsFields,
    NewsUpdateFields,
    StaffCommentCreate,
)
from app.services.attachment_service import read_upload
from app.services.news_service import NewsService
from app.utils.logger import logger

router = APIRouter(prefix="/news", tags=["news"])


def get_news_service(
    request: Request,
    session: AsyncSession = Depends(get_async_session)
) -> NewsService:
    return NewsService(session, request.app.state.news_images)


@router.post("/create", response_model=ApiResponse, status_code=201)
async def create_news(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    read_time: Optional[str] = Form(None),
    tag: Optional[str] = Form(None),
    quotes: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    service: NewsService = Depends(get_news_service)
):
    logger.info(f" 뉴스 생성 요청: title={title!r}, user={user.id}")
    fields = parse_fields(
        NewsFields,
        title=title,
        description=description,
        read_time=read_time,
        tag=tag,
        quotes=quotes
    )
    upload = await read_upload(image, service.images.max_size)
    news = await service.create(fields, upload, user.id)
    return ApiResponse(data=news.to_response())


@router.get("/", response_model=ApiResponse)
async def get_news(service: NewsService = Depends(get_news_service)):
    news_list = await service.list_all()
    return ApiResponse(data=[news.to_response() for news in news_list])


@router.get("/{news_id}", response_model=ApiResponse)
async def get_news_by_id(news_id: int, service: NewsService = Depends(get_news_service)):
    news = await service.get_by_id(news_id)
    return ApiResponse(data=news.to_response())


@router.put("/{news_id}", response_model=ApiResponse)
async def update_news(
    news_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    read_time: Optional[str] = Form(None),
    tag: Optional[str] = Form(None),
    quotes: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    service: NewsService = Depends(get_news_service)
):
    fields = parse_fields(
        NewsUpdateFields,
        title=title,
        description=description,
        read_time=read_time,
        tag=tag,
        quotes=quotes
    )
    upload = await read_upload(image, service.images.max_size)
    news = await service.update(news_id, fields, upload, user.id)
    return ApiResponse(data=news.to_response())


@router.delete("/{news_id}", response_model=ApiResponse)
async def delete_news(
    news_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: NewsService = Depends(get_news_service)
):
    logger.info(f"🗑️ 뉴스 삭제 요청: id={news_id}, user={user.id}")
    await service.delete(news_id)
    return ApiResponse(message="News deleted successfully")


# 댓글
@router.post("/{news_id}/comments", response_model=ApiResponse, status_code=201)
async def create_comment(
    news_id: int,
    payload: dict = Body(...),
    service: NewsService = Depends(get_news_service)
):
    data = parse_fields(CommentCreate, **payload)
    comment = await service.add_comment(news_id, data)
    return ApiResponse(data=comment.to_response())


@router.post("/news/{news_id}/comments", response_model=ApiResponse, status_code=201)
async def create_staff_comment(
    news_id: int,
    payload: dict = Body(...),
    user: CurrentUser = Depends(get_current_user),
    service: NewsService = Depends(get_news_service)
):
    data = parse_fields(StaffCommentCreate, **payload)
    comment = await service.add_staff_comment(news_id, data, user.id)
    return ApiResponse(data=comment.to_response())


@router.get("/{news_id}/comments", response_model=ApiResponse)
async def get_comments(news_id: int, service: NewsService = Depends(get_news_service)):
    comments = await service.list_comments(news_id)
    return ApiResponse(data=[comment.to_response() for comment in comments])


@router.put("/comments/{comment_id}", response_model=ApiResponse)
async def update_comment(
    comment_id: int,
    payload: dict = Body(...),
    service: NewsService = Depends(get_news_service)
):
    data = parse_fields(CommentUpdate, **payload)
    comment = await service.update_comment(comment_id, data)
    return ApiResponse(data=comment.to_response())


@router.delete("/comments/{comment_id}", response_model=ApiResponse)
async def delete_comment(comment_id: int, service: NewsService = Depends(get_news_service)):
    await service.delete_comment(comment_id)
    return ApiResponse(message="Comment deleted successfully")
