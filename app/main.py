# app/main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.api import letter, news, web_content
from app.exceptions import ServiceError
from app.models.base import Database
from app.schemas.commons_schemas import ErrorResponse
from app.services.attachment_service import AttachmentStore
from app.services.scheduler_service import SchedulerService
from app.utils.logger import setup_logger
from app.config import settings
import uvicorn
import os

# 로거 설정
logger = setup_logger()

app = FastAPI(
    title=settings.app_name,
    description="CSO 공문 발송/열람 추적 + 웹 콘텐츠 관리 백엔드",
    version="1.0.0",
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# DB / 업로드 저장소는 app.state에 보관하고 의존성으로 주입
database = Database(settings.sqlalchemy_url, echo=settings.debug and not settings.is_production)
letter_attachments = AttachmentStore(
    settings.upload_root,
    settings.letter_upload_dir,
    settings.allowed_attachment_extensions,
    settings.max_upload_size
)
news_images = AttachmentStore(
    settings.upload_root,
    settings.news_upload_dir,
    settings.allowed_image_extensions,
    settings.max_upload_size
)
hero_images = AttachmentStore(
    settings.upload_root,
    settings.hero_upload_dir,
    settings.allowed_image_extensions,
    settings.max_upload_size
)
scheduler_service = SchedulerService(
    database,
    {"letter": letter_attachments, "news": news_images, "hero": hero_images},
    cleanup_hour=settings.attachment_cleanup_hour,
    grace_minutes=settings.orphan_grace_minutes
)

app.state.database = database
app.state.letter_attachments = letter_attachments
app.state.news_images = news_images
app.state.hero_images = hero_images


def _error_response(status_code: int, message: str, error: str = None) -> JSONResponse:
    body = ErrorResponse(message=message, error=None if settings.is_production else error)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    cause = exc.__cause__
    if exc.status_code >= 500:
        logger.error(f" {request.method} {request.url.path} 실패: {exc.message} ({cause})")
    return _error_response(exc.status_code, exc.message, str(cause) if cause else None)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=str(exc.detail)).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return _error_response(400, "; ".join(messages))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f" {request.method} {request.url.path} 처리 중 오류: {exc}")
    return _error_response(500, "Internal server error", str(exc))


@app.on_event("startup")
async def startup_event():
    """앱 시작시 초기화"""
    logger.info(f" {settings.app_name} 시작")
    logger.info(f" 환경: {settings.environment}, Debug 모드: {settings.debug}")

    os.makedirs(letter_attachments.directory, exist_ok=True)
    os.makedirs(news_images.directory, exist_ok=True)
    os.makedirs(hero_images.directory, exist_ok=True)

    app.state.database.init()
    try:
        await app.state.database.create_tables()
        logger.info("🗄️ 데이터베이스 초기화 완료")
    except Exception as e:
        logger.warning(f" 데이터베이스 초기화 실패: {e}")

    if settings.scheduler_enabled:
        scheduler_service.start()

@app.on_event("shutdown")
async def shutdown_event():
    """앱 종료시 정리"""
    logger.info(f" {settings.app_name} 종료")
    scheduler_service.stop()
    await app.state.database.close()

# 디렉토리 생성 후 정적 파일 마운트
os.makedirs(settings.upload_root, exist_ok=True)

app.include_router(letter.router, prefix="/api")
app.include_router(news.router, prefix="/api")
app.include_router(web_content.hero_router, prefix="/api")
app.include_router(web_content.about_router, prefix="/api")
app.include_router(web_content.contact_router, prefix="/api")

# 업로드 파일 서빙 (첨부파일, 뉴스/히어로 이미지)
app.mount("/public", StaticFiles(directory=settings.upload_root), name="public")

@app.get("/")
async def root():
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "features": [
            "레터 발송 (전체/지정 CSO)",
            "CSO별 열람 추적",
            "첨부파일 수명주기 관리",
            "뉴스 / 댓글",
            "히어로 슬라이드 / 소개 / 연락처"
        ]
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.environment,
        "uploads": {
            "letter": str(letter_attachments.directory),
            "news": str(news_images.directory),
            "hero": str(hero_images.directory)
        },
        "track_broadcast_reads": settings.track_broadcast_reads
    }

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
