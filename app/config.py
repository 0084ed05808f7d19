# app/config.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", extra="allow")

    app_name: str = "CSO Office Admin Service"
    environment: str = "development"

    # MySQL
    mysql_host: str = "localhost"
    mysql_port: int = 3306
    mysql_user: str = "root"
    mysql_password: str = ""
    mysql_database: str = "cso_admin"

    # 전체 URL 지정시 MySQL 설정 무시 (테스트용 sqlite 등)
    database_url: Optional[str] = None

    # Uploads
    upload_root: str = "public"
    letter_upload_dir: str = "letter"
    news_upload_dir: str = "news"
    hero_upload_dir: str = "hero"
    max_upload_size: int = 5 * 1024 * 1024
    allowed_attachment_extensions: List[str] = ["pdf", "doc", "docx", "jpg", "jpeg", "png"]
    allowed_image_extensions: List[str] = ["jpg", "jpeg", "png", "gif", "webp"]

    # Contact form mail (smtp_host 미설정시 메일 전송 비활성)
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_start_tls: bool = True
    contact_recipient: Optional[str] = None

    # JWT
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24

    # Letters
    track_broadcast_reads: bool = False

    # Scheduler
    scheduler_enabled: bool = True
    attachment_cleanup_hour: int = 3
    orphan_grace_minutes: int = 60

    cors_origins: List[str] = ["*"]

    # App Settings
    debug: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_database}"
        )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

settings = Settings()
