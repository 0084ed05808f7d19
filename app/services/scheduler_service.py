from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from datetime import datetime, timedelta
from typing import Dict, Set

from sqlalchemy.future import select

from app.exceptions import AttachmentIOError
from app.models.base import Database
from app.models.letter import Letter
from app.models.news import News
from app.models.web_content import HeroSlide
from app.services.attachment_service import AttachmentStore
from app.utils.logger import logger

# 저장소 이름 -> 파일 경로를 참조하는 컬럼
REFERENCE_COLUMNS = {
    "letter": Letter.attachment_path,
    "news": News.image,
    "hero": HeroSlide.image_url,
}


class SchedulerService:
    """어떤 행에서도 참조하지 않는 업로드 파일 정리"""

    def __init__(
        self,
        database: Database,
        stores: Dict[str, AttachmentStore],
        cleanup_hour: int = 3,
        grace_minutes: int = 60
    ):
        self.scheduler = AsyncIOScheduler()
        self.database = database
        self.stores = stores
        self.cleanup_hour = cleanup_hour
        self.grace_minutes = grace_minutes
        logger.info(" SchedulerService 초기화 완료")

    def start(self):
        try:
            self.scheduler.add_job(
                func=self.attachment_cleanup_job,
                trigger=CronTrigger(hour=self.cleanup_hour, minute=0),
                id='attachment_cleanup',
                replace_existing=True
            )
            self.scheduler.start()
            logger.info(" 스케줄러 시작 - 첨부파일 정리 작업 등록")
        except Exception as e:
            logger.error(f" 스케줄러 시작 실패: {e}")

    def stop(self):
        try:
            if self.scheduler.running:
                self.scheduler.shutdown()
            logger.info(" 스케줄러 종료")
        except Exception as e:
            logger.error(f" 스케줄러 종료 실패: {e}")

    async def referenced_paths(self) -> Set[str]:
        """행에서 참조 중인 파일 ("<subdir>/<파일명>" 형태로 정규화)"""
        referenced: Set[str] = set()
        async with self.database.session() as session:
            for name, store in self.stores.items():
                column = REFERENCE_COLUMNS.get(name)
                if column is None:
                    continue
                result = await session.execute(select(column).where(column.isnot(None), column != ""))
                # 예전 데이터의 "/letter/..", 파일명만 저장된 값도 같은 파일로 본다
                referenced.update(store.relative_path(path) for path in result.scalars().all())
        return referenced

    async def attachment_cleanup_job(self) -> int:
        removed = 0
        try:
            logger.info(" 첨부파일 정리 작업 시작")
            referenced = await self.referenced_paths()
            cutoff = datetime.now() - timedelta(minutes=self.grace_minutes)

            for name, store in self.stores.items():
                for path, modified in await store.list_files():
                    # 업로드 직후 아직 커밋 전인 파일은 건드리지 않음
                    if path in referenced or modified > cutoff:
                        continue
                    try:
                        if await store.delete(path):
                            removed += 1
                    except AttachmentIOError as e:
                        logger.error(f" orphan 파일 삭제 실패 ({name}): {path} ({e.message})")

            logger.info(f" 첨부파일 정리 완료: {removed}개 삭제")
        except Exception as e:
            logger.error(f" 첨부파일 정리 작업 실패: {e}")
        return removed
