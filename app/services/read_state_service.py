# app/services/read_state_service.py
"""
레터 열람 상태 추적 - 읽음 처리 / CSO별 미열람 개수
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import ServiceError
from app.models.letter import Letter
from app.schemas.letter_schemas import RecipientState
from app.services import recipient_codec as codec
from app.services.letter_service import get_letter_or_404
from app.utils.logger import logger


class ReadStateService:
    def __init__(self, session: AsyncSession, track_broadcast_reads: bool = False):
        self.session = session
        self.track_broadcast_reads = track_broadcast_reads

    async def mark_read(self, letter_id: int, cso_id: int) -> Optional[RecipientState]:
        """읽음 처리 - 이미 읽은 경우 read_at만 갱신"""
        letter = await get_letter_or_404(self.session, letter_id, for_update=True)

        if letter.send_to_all and not self.track_broadcast_reads:
            logger.warning(f" 전체 발송 레터는 열람 추적 안 함: letter={letter_id}, cso={cso_id}")
            return None

        now = datetime.utcnow()
        states = codec.decode_stored(letter.selected_csos)
        if states is None:
            if letter.selected_csos:
                # 저장값이 깨졌어도 읽음 처리는 막지 않는다
                logger.warning(f" 수신자 목록 복구 불가, 새 목록으로 대체: letter={letter_id}")
            states = []

        state = codec.find(states, cso_id)
        if state is None:
            state = RecipientState(id=cso_id)
            states.append(state)
        state.read = True
        state.read_at = now

        letter.selected_csos = codec.encode(states)
        letter.updated_at = now
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f" 읽음 처리 실패: letter={letter_id}, cso={cso_id} ({e})")
            raise ServiceError("Failed to mark letter as read") from e

        logger.info(f" 읽음 처리 완료: letter={letter_id}, cso={cso_id}")
        return state

    async def get_unread_count(self, cso_id: int) -> int:
        # 저장 계층에서 ID 문자열 포함 여부로 먼저 거른 뒤 구조적으로 확인
        targeted = and_(
            Letter.send_to_all == False,  # noqa: E712
            Letter.selected_csos.like(f"%{cso_id}%")
        )
        condition = or_(Letter.send_to_all == True, targeted) if self.track_broadcast_reads else targeted  # noqa: E712

        result = await self.session.execute(
            select(Letter.id, Letter.send_to_all, Letter.selected_csos).where(condition)
        )

        unread = 0
        for row in result:
            state = codec.find(codec.recover_stored(row.selected_csos), cso_id)
            if row.send_to_all:
                if state is None or not state.read:
                    unread += 1
            elif state is not None and not state.read:
                unread += 1
        return unread
