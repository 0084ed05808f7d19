# app/services/news_service.py
"""
뉴스 저장소 - 대표 이미지 수명주기 + 댓글
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.future import select

from app.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.models.news import News, NewsComment
from app.models.staff import Staff
from app.schemas.news_schemas import (
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    NewsFields,
    NewsResponse,
    NewsUpdateFields,
    StaffCommentCreate,
)
from app.services.attachment_service import UploadPayload
from app.services.content_service import ImageContentService
from app.utils.logger import logger


class NewsService(ImageContentService):
    resource = "news"

    async def _get_news(self, news_id: int) -> News:
        result = await self.session.execute(select(News).where(News.id == news_id))
        news = result.scalar_one_or_none()
        if news is None:
            raise NotFoundError("News not found")
        return news

    async def _get_comment(self, comment_id: int) -> NewsComment:
        result = await self.session.execute(select(NewsComment).where(NewsComment.id == comment_id))
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def _get_staff(self, staff_id) -> Staff:
        staff = await Staff.get_by_id(self.session, staff_id)
        if staff is None:
            raise ForbiddenError("Unauthorized access")
        return staff

    async def create(self, fields: NewsFields, image: Optional[UploadPayload], staff_id) -> NewsResponse:
        staff = await self._get_staff(staff_id)
        image_path = await self._save_image(image)

        news = News(author=staff.name, image=image_path, **fields.model_dump())
        self.session.add(news)
        await self._commit("create", image_path)

        logger.info(f" 뉴스 생성 완료: id={news.id}, author={staff.name}")
        return NewsResponse.model_validate(news)

    async def list_all(self) -> List[NewsResponse]:
        result = await self.session.execute(select(News).order_by(News.created_at.desc(), News.id.desc()))
        return [NewsResponse.model_validate(news) for news in result.scalars().all()]

    async def get_by_id(self, news_id: int) -> NewsResponse:
        return NewsResponse.model_validate(await self._get_news(news_id))

    async def update(self, news_id: int, fields: NewsUpdateFields, image: Optional[UploadPayload], staff_id) -> NewsResponse:
        news = await self._get_news(news_id)
        staff = await self._get_staff(staff_id)

        for key, value in fields.model_dump(exclude_none=True).items():
            setattr(news, key, value)
        news.author = staff.name
        news.updated_at = datetime.utcnow()

        old_image = news.image
        new_image = await self._save_image(image)
        if new_image:
            news.image = new_image
        await self._commit("update", new_image)

        if new_image and old_image:
            await self._discard(old_image)

        logger.info(f" 뉴스 수정 완료: id={news_id}")
        return NewsResponse.model_validate(news)

    async def delete(self, news_id: int):
        news = await self._get_news(news_id)
        image_path = news.image

        await self.session.execute(delete(NewsComment).where(NewsComment.news_id == news_id))
        await self.session.delete(news)
        await self._commit("delete")

        await self._discard(image_path)
        logger.info(f"🗑️ 뉴스 삭제 완료: id={news_id}")

    async def add_comment(self, news_id: int, data: CommentCreate) -> CommentResponse:
        await self._get_news(news_id)
        comment = NewsComment(news_id=news_id, **data.model_dump())
        self.session.add(comment)
        await self._commit("comment on")
        return CommentResponse.model_validate(comment)

    async def add_staff_comment(self, news_id: int, data: StaffCommentCreate, staff_id) -> CommentResponse:
        await self._get_news(news_id)
        staff = await self._get_staff(staff_id)
        comment = NewsComment(news_id=news_id, name=staff.name, email=staff.email, content=data.content)
        self.session.add(comment)
        await self._commit("comment on")
        return CommentResponse.model_validate(comment)

    async def list_comments(self, news_id: int) -> List[CommentResponse]:
        result = await self.session.execute(
            select(NewsComment)
            .where(NewsComment.news_id == news_id)
            .order_by(NewsComment.created_at.desc(), NewsComment.id.desc())
        )
        return [CommentResponse.model_validate(c) for c in result.scalars().all()]

    async def update_comment(self, comment_id: int, data: CommentUpdate) -> CommentResponse:
        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError("No data provided for update")
        comment = await self._get_comment(comment_id)
        for key, value in changes.items():
            setattr(comment, key, value)
        await self._commit("update comment on")
        return CommentResponse.model_validate(comment)

    async def delete_comment(self, comment_id: int):
        comment = await self._get_comment(comment_id)
        await self.session.delete(comment)
        await self._commit("delete comment on")
