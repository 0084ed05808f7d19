# app/services/letter_service.py
"""
레터 저장소
레터 CRUD + 첨부파일 수명주기 + 수신자 목록 정규화를 하나의 트랜잭션으로 처리
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import AttachmentIOError, NotFoundError, ServiceError
from app.models.letter import Letter
from app.models.staff import Staff
from app.schemas.letter_schemas import (
    CsoLetterResponse,
    LetterFields,
    LetterResponse,
    LetterUpdateFields,
)
from app.services import recipient_codec as codec
from app.services.attachment_service import AttachmentRef, AttachmentStore, UploadPayload
from app.utils.logger import logger


async def get_letter_or_404(session: AsyncSession, letter_id: int, for_update: bool = False) -> Letter:
    query = select(Letter).where(Letter.id == letter_id)
    if for_update:
        # 같은 레터의 selected_csos 동시 수정 직렬화 (sqlite에서는 무시됨)
        query = query.with_for_update()
    result = await session.execute(query)
    letter = result.scalar_one_or_none()
    if letter is None:
        raise NotFoundError("Letter not found")
    return letter


async def staff_names(session: AsyncSession, staff_ids: Iterable[Any]) -> Dict[str, str]:
    """created_by -> 직원 이름"""
    numeric = {int(s) for s in staff_ids if s is not None and str(s).isdigit()}
    if not numeric:
        return {}
    result = await session.execute(select(Staff.id, Staff.name).where(Staff.id.in_(numeric)))
    return {str(row.id): row.name for row in result}


class LetterService:
    def __init__(self, session: AsyncSession, attachments: AttachmentStore, track_broadcast_reads: bool = False):
        self.session = session
        self.attachments = attachments
        self.track_broadcast_reads = track_broadcast_reads

    async def _save_attachment(self, upload: Optional[UploadPayload]) -> Optional[AttachmentRef]:
        if upload is None:
            return None
        self.attachments.validate(upload.filename, upload.content_type, upload.size)
        return await self.attachments.save(upload.content, upload.filename, upload.content_type)

    async def _discard(self, path: Optional[str]):
        """정리용 삭제 - 실패해도 요청은 진행 (orphan 정리 작업이 처리)"""
        try:
            await self.attachments.delete(path)
        except AttachmentIOError as e:
            logger.error(f" 첨부파일 정리 실패: {path} ({e.message})")

    def _to_response(self, letter: Letter, names: Dict[str, str]) -> LetterResponse:
        states = codec.recover_stored(letter.selected_csos)
        return LetterResponse(
            id=letter.id,
            title=letter.title,
            summary=letter.summary,
            type=letter.type,
            send_to_all=bool(letter.send_to_all),
            selected_csos=states,
            recipients=codec.summarize(states),
            attachment_path=letter.attachment_path,
            attachment_name=letter.attachment_name,
            attachment_mimetype=letter.attachment_mimetype,
            created_by=names.get(letter.created_by, letter.created_by),
            created_at=letter.created_at,
            updated_at=letter.updated_at
        )

    async def create(
        self,
        fields: LetterFields,
        recipients_input: Any = None,
        attachment: Optional[UploadPayload] = None,
        created_by: Any = None
    ) -> LetterResponse:
        # 새 레터의 수신자는 모두 미열람으로 시작
        recipients = None if fields.send_to_all else codec.normalize(recipients_input, previous=[])
        saved = await self._save_attachment(attachment)

        letter = Letter(
            title=fields.title,
            summary=fields.summary,
            type=fields.type,
            send_to_all=fields.send_to_all,
            selected_csos=codec.encode(recipients),
            created_by=str(created_by) if created_by is not None else None
        )
        if saved:
            letter.attachment_path = saved.path
            letter.attachment_name = saved.name
            letter.attachment_mimetype = saved.mime_type

        try:
            self.session.add(letter)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f" 레터 생성 실패: {e}")
            if saved:
                await self._discard(saved.path)
            raise ServiceError("Failed to create letter") from e

        logger.info(f" 레터 생성 완료: id={letter.id}, 수신자={len(recipients or [])}, 전체발송={fields.send_to_all}")
        return self._to_response(letter, await staff_names(self.session, [letter.created_by]))

    async def update(
        self,
        letter_id: int,
        fields: LetterUpdateFields,
        recipients_input: Any = None,
        attachment: Optional[UploadPayload] = None
    ) -> LetterResponse:
        letter = await get_letter_or_404(self.session, letter_id, for_update=True)
        if attachment is not None:
            self.attachments.validate(attachment.filename, attachment.content_type, attachment.size)

        for key, value in fields.model_dump(exclude_none=True).items():
            setattr(letter, key, value)

        if letter.send_to_all:
            # 전체 발송 레터는 수신자 목록 없음 (열람 추적 정책이 켜져 있으면 기존 기록 유지)
            if not self.track_broadcast_reads:
                letter.selected_csos = None
        elif recipients_input is not None:
            previous = codec.recover_stored(letter.selected_csos)
            letter.selected_csos = codec.encode(codec.normalize(recipients_input, previous=previous))

        old_path = letter.attachment_path
        saved = await self._save_attachment(attachment)
        if saved:
            letter.attachment_path = saved.path
            letter.attachment_name = saved.name
            letter.attachment_mimetype = saved.mime_type
        letter.updated_at = datetime.utcnow()

        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f" 레터 수정 실패: id={letter_id} ({e})")
            if saved:
                await self._discard(saved.path)
            raise ServiceError("Failed to update letter") from e

        # 커밋 이후에만 이전 파일 삭제
        if saved and old_path and old_path != saved.path:
            await self._discard(old_path)

        logger.info(f" 레터 수정 완료: id={letter_id}")
        return self._to_response(letter, await staff_names(self.session, [letter.created_by]))

    async def delete(self, letter_id: int):
        letter = await get_letter_or_404(self.session, letter_id)
        attachment_path = letter.attachment_path

        try:
            await self.session.delete(letter)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f" 레터 삭제 실패: id={letter_id} ({e})")
            raise ServiceError("Failed to delete letter") from e

        # 행 삭제 커밋 후 파일 삭제 (파일이 남는 쪽이 행이 남는 쪽보다 낫다)
        await self._discard(attachment_path)
        logger.info(f"🗑️ 레터 삭제 완료: id={letter_id}")

    async def _all_letters(self) -> List[Letter]:
        result = await self.session.execute(
            select(Letter).order_by(Letter.created_at.desc(), Letter.id.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[LetterResponse]:
        letters = await self._all_letters()
        names = await staff_names(self.session, [letter.created_by for letter in letters])
        return [self._to_response(letter, names) for letter in letters]

    async def get_by_id(self, letter_id: int) -> LetterResponse:
        letter = await get_letter_or_404(self.session, letter_id)
        return self._to_response(letter, await staff_names(self.session, [letter.created_by]))

    async def list_for_recipient(self, cso_id: int) -> List[CsoLetterResponse]:
        """전체 발송 레터 + 해당 CSO가 수신자인 레터"""
        letters = await self._all_letters()
        names = await staff_names(self.session, [letter.created_by for letter in letters])

        visible = []
        for letter in letters:
            state = None
            if letter.send_to_all:
                if self.track_broadcast_reads:
                    state = codec.find(codec.recover_stored(letter.selected_csos), cso_id)
            else:
                state = codec.find(codec.recover_stored(letter.selected_csos), cso_id)
                if state is None:
                    continue

            visible.append(CsoLetterResponse(
                id=letter.id,
                title=letter.title,
                summary=letter.summary,
                type=letter.type,
                send_to_all=bool(letter.send_to_all),
                attachment_path=letter.attachment_path,
                attachment_name=letter.attachment_name,
                attachment_mimetype=letter.attachment_mimetype,
                created_by=names.get(letter.created_by, letter.created_by),
                created_at=letter.created_at,
                is_read=bool(state and state.read),
                read_at=state.read_at if state else None
            ))
        return visible
