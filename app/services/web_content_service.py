# app/services/web_content_service.py
"""
홈페이지 콘텐츠 - 히어로 슬라이드(이미지 필수), 소개, 연락처 + 문의 메일 전달
"""

import json
from datetime import datetime
from email.mime.text import MIMEText
from typing import List, Optional, Tuple

import aiosmtplib
from sqlalchemy import delete
from sqlalchemy.future import select

from app.exceptions import MailNotConfiguredError, NotFoundError, ServiceError, ValidationError
from app.models.web_content import AboutSection, ContactContent, HeroSlide
from app.schemas.web_content_schemas import (
    AboutFields,
    AboutResponse,
    ContactFields,
    ContactMessage,
    ContactResponse,
    HeroFields,
    HeroSlideResponse,
    HeroUpdateFields,
)
from app.services.attachment_service import UploadPayload
from app.services.content_service import ContentService, ImageContentService
from app.utils.logger import logger


class HeroService(ImageContentService):
    resource = "hero slide"

    async def _get_slide(self, slide_id: int) -> HeroSlide:
        result = await self.session.execute(select(HeroSlide).where(HeroSlide.id == slide_id))
        slide = result.scalar_one_or_none()
        if slide is None:
            raise NotFoundError("Slide not found")
        return slide

    async def list_all(self) -> List[HeroSlideResponse]:
        result = await self.session.execute(select(HeroSlide).order_by(HeroSlide.id.asc()))
        return [HeroSlideResponse.model_validate(slide) for slide in result.scalars().all()]

    async def get_by_id(self, slide_id: int) -> HeroSlideResponse:
        return HeroSlideResponse.model_validate(await self._get_slide(slide_id))

    async def create(self, fields: HeroFields, image: Optional[UploadPayload]) -> HeroSlideResponse:
        if image is None:
            raise ValidationError("Image is required")
        image_path = await self._save_image(image)

        slide = HeroSlide(image_url=image_path, **fields.model_dump())
        self.session.add(slide)
        await self._commit("create", image_path)

        logger.info(f" 히어로 슬라이드 생성 완료: id={slide.id}")
        return HeroSlideResponse.model_validate(slide)

    async def update(self, slide_id: int, fields: HeroUpdateFields, image: Optional[UploadPayload]) -> HeroSlideResponse:
        slide = await self._get_slide(slide_id)

        for key, value in fields.model_dump(exclude_none=True).items():
            setattr(slide, key, value)
        slide.updated_at = datetime.utcnow()

        old_image = slide.image_url
        new_image = await self._save_image(image)
        if new_image:
            slide.image_url = new_image
        await self._commit("update", new_image)

        # 새 이미지가 커밋된 뒤에만 이전 파일 삭제
        if new_image and old_image:
            await self._discard(old_image)

        logger.info(f" 히어로 슬라이드 수정 완료: id={slide_id}")
        return HeroSlideResponse.model_validate(slide)

    async def delete(self, slide_id: int):
        slide = await self._get_slide(slide_id)
        image_path = slide.image_url

        await self.session.delete(slide)
        await self._commit("delete")

        await self._discard(image_path)
        logger.info(f"🗑️ 히어로 슬라이드 삭제 완료: id={slide_id}")


class AboutService(ContentService):
    resource = "about section"

    async def _get_section(self, section_id: int) -> AboutSection:
        result = await self.session.execute(select(AboutSection).where(AboutSection.id == section_id))
        section = result.scalar_one_or_none()
        if section is None:
            raise NotFoundError("About section not found")
        return section

    @staticmethod
    def _columns(fields: AboutFields) -> dict:
        data = fields.model_dump()
        data["core_values"] = json.dumps(data["core_values"], ensure_ascii=False)
        return data

    async def get(self) -> AboutResponse:
        """첫 번째 소개 섹션"""
        result = await self.session.execute(select(AboutSection).order_by(AboutSection.id.asc()).limit(1))
        section = result.scalar_one_or_none()
        if section is None:
            raise NotFoundError("About section not found")
        return AboutResponse.model_validate(section)

    async def create(self, fields: AboutFields) -> AboutResponse:
        section = AboutSection(**self._columns(fields))
        self.session.add(section)
        await self._commit("create")
        logger.info(f" 소개 섹션 생성 완료: id={section.id}")
        return AboutResponse.model_validate(section)

    async def update(self, section_id: int, fields: AboutFields) -> AboutResponse:
        section = await self._get_section(section_id)
        for key, value in self._columns(fields).items():
            setattr(section, key, value)
        section.updated_at = datetime.utcnow()
        await self._commit("update")
        return AboutResponse.model_validate(section)

    async def delete(self, section_id: int):
        section = await self._get_section(section_id)
        await self.session.delete(section)
        await self._commit("delete")
        logger.info(f"🗑️ 소개 섹션 삭제 완료: id={section_id}")


class ContactService(ContentService):
    resource = "contact info"

    def __init__(self, session, mail_settings=None):
        super().__init__(session)
        self.mail_settings = mail_settings

    async def _first(self) -> Optional[ContactContent]:
        result = await self.session.execute(select(ContactContent).order_by(ContactContent.id.asc()).limit(1))
        return result.scalar_one_or_none()

    async def get(self) -> ContactResponse:
        contact = await self._first()
        if contact is None:
            raise NotFoundError("No contact info found")
        return ContactResponse.model_validate(contact)

    async def save(self, fields: ContactFields) -> Tuple[ContactResponse, bool]:
        """연락처 upsert - (결과, 새로 생성 여부)"""
        data = fields.model_dump()
        data["email"] = json.dumps(data["email"], ensure_ascii=False)
        data["phone"] = json.dumps(data["phone"], ensure_ascii=False)

        contact = await self._first()
        created = contact is None
        if created:
            contact = ContactContent(**data)
            self.session.add(contact)
        else:
            for key, value in data.items():
                setattr(contact, key, value)
            contact.updated_at = datetime.utcnow()
        await self._commit("save")

        logger.info(f" 연락처 정보 {'생성' if created else '수정'}: id={contact.id}")
        return ContactResponse.model_validate(contact), created

    async def delete_all(self):
        await self.session.execute(delete(ContactContent))
        await self._commit("delete")
        logger.info("🗑️ 연락처 정보 전체 삭제")

    async def send_message(self, message: ContactMessage):
        """문의 내용을 관리자 메일로 전달"""
        mail = self.mail_settings
        if mail is None or not mail.smtp_host or not mail.contact_recipient:
            raise MailNotConfiguredError("Contact mail is not configured")

        body = (
            f"Name: {message.name}\n"
            f"Email: {message.email}\n"
            f"Phone: {message.phone or 'N/A'}\n"
            f"Subject: {message.subject or 'N/A'}\n"
            f"Message: {message.message}\n"
        )
        mime = MIMEText(body, "plain", "utf-8")
        mime["From"] = mail.smtp_user or message.email
        mime["To"] = mail.contact_recipient
        mime["Reply-To"] = message.email
        mime["Subject"] = f"Contact Form: {message.subject or 'N/A'}"

        try:
            await aiosmtplib.send(
                mime,
                hostname=mail.smtp_host,
                port=mail.smtp_port,
                username=mail.smtp_user,
                password=mail.smtp_password,
                start_tls=mail.smtp_start_tls
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f" 문의 메일 전송 실패: from={message.email} ({e})")
            raise ServiceError("Failed to send message.") from e

        logger.info(f" 문의 메일 전송: from={message.email}")
