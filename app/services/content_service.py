# app/services/content_service.py
"""
웹 콘텐츠(뉴스, 히어로 슬라이드, 소개, 연락처) 서비스 공통 처리
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import AttachmentIOError, ServiceError
from app.services.attachment_service import AttachmentStore, UploadPayload
from app.utils.logger import logger


class ContentService:
    resource = "content"

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _rollback(self, action: str, error: Exception):
        await self.session.rollback()
        logger.error(f" {self.resource} {action} 실패: {error}")

    async def _commit(self, action: str):
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._rollback(action, e)
            raise ServiceError(f"Failed to {action} {self.resource}") from e


class ImageContentService(ContentService):
    """이미지 한 개를 가진 콘텐츠"""

    def __init__(self, session: AsyncSession, images: AttachmentStore):
        super().__init__(session)
        self.images = images

    async def _save_image(self, image: Optional[UploadPayload]) -> Optional[str]:
        if image is None:
            return None
        self.images.validate(image.filename, image.content_type, image.size)
        saved = await self.images.save(image.content, image.filename, image.content_type)
        return saved.path

    async def _discard(self, path: Optional[str]):
        """정리용 삭제 - 실패는 로그만 (orphan 정리 작업이 처리)"""
        try:
            await self.images.delete(path)
        except AttachmentIOError as e:
            logger.error(f" {self.resource} 이미지 정리 실패: {path} ({e.message})")

    async def _commit(self, action: str, new_image: Optional[str] = None):
        """커밋 실패시 롤백하고 이번 요청에서 저장한 이미지 삭제"""
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._rollback(action, e)
            if new_image:
                await self._discard(new_image)
            raise ServiceError(f"Failed to {action} {self.resource}") from e
