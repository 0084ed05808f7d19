import logging
from logging.handlers import RotatingFileHandler
from app.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# 외부 라이브러리 로그는 경고 이상만
NOISY_LOGGERS = ("apscheduler", "aiomysql", "multipart")


def setup_logger(name: str = "cso_admin"):
    """서비스 로거 - 콘솔 + (설정시) 로테이션 파일"""

    logger = logging.getLogger(name)
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if settings.log_file:
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    return logger

# 전역 로거 인스턴스
logger = setup_logger()
