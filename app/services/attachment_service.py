# app/services/attachment_service.py
"""
첨부파일 저장소
업로드 루트(public) 아래 고정 하위 폴더에 파일 하나씩 저장/삭제
파일 I/O는 aiofiles로 이벤트 루프 밖에서 수행
"""

import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from app.exceptions import AttachmentConflictError, AttachmentIOError, ValidationError
from app.utils.logger import logger

MIME_TYPES = {
    "pdf": {"application/pdf"},
    "doc": {"application/msword"},
    "docx": {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
    "jpg": {"image/jpeg"},
    "jpeg": {"image/jpeg"},
    "png": {"image/png"},
    "gif": {"image/gif"},
    "webp": {"image/webp"},
}

_UNSAFE_CHARS = re.compile(r"[^\w.\-]+")


@dataclass
class AttachmentRef:
    path: str
    name: str
    mime_type: Optional[str] = None


@dataclass
class UploadPayload:
    """라우터에서 읽어온 업로드 파일"""
    content: bytes
    filename: str
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


def _size_limit_text(max_size: int) -> str:
    if max_size >= 1024 * 1024:
        return f"{max_size // (1024 * 1024)}MB"
    return f"{max_size} bytes"


async def read_upload(upload: Optional[UploadFile], max_size: int) -> Optional[UploadPayload]:
    """multipart 파일 -> UploadPayload (파일 없으면 None)

    최대 max_size + 1 바이트만 읽어서 초과 여부를 판단한다.
    """
    if upload is None or not upload.filename:
        return None
    try:
        content = await upload.read(max_size + 1)
    finally:
        await upload.close()
    if len(content) > max_size:
        raise ValidationError(f"File exceeds the {_size_limit_text(max_size)} limit")
    return UploadPayload(content=content, filename=upload.filename, content_type=upload.content_type)


def sanitize_filename(name: str) -> str:
    base = Path(name or "").name
    base = _UNSAFE_CHARS.sub("_", base).strip("._")
    return base or "attachment"


class AttachmentStore:
    def __init__(
        self,
        root: str,
        subdir: str,
        allowed_extensions: Iterable[str],
        max_size: int
    ):
        self.root = Path(root)
        self.subdir = subdir.strip("/")
        self.allowed_extensions = {ext.lower().lstrip(".") for ext in allowed_extensions}
        self.max_size = max_size

    @property
    def directory(self) -> Path:
        return self.root / self.subdir

    def validate(self, filename: str, mime_type: Optional[str], size: int):
        """확장자 / MIME / 크기 검사"""
        ext = Path(filename or "").suffix.lower().lstrip(".")
        if ext not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions)).upper()
            raise ValidationError(f"Only {allowed} files are allowed")
        if mime_type and mime_type not in MIME_TYPES.get(ext, set()):
            raise ValidationError(f"File type {mime_type} does not match .{ext}")
        if size > self.max_size:
            raise ValidationError(f"File exceeds the {_size_limit_text(self.max_size)} limit")

    def relative_path(self, path: str) -> str:
        """저장된 경로 표기 -> "<subdir>/<파일명>"

        예전 데이터는 "/letter/..", "public/letter/.." 또는 파일명만 저장한 경우가 있다.
        """
        relative = path.replace("\\", "/").lstrip("/")
        root_prefix = f"{self.root.name}/"
        if relative.startswith(root_prefix):
            relative = relative[len(root_prefix):]
        if "/" not in relative:
            relative = f"{self.subdir}/{relative}"
        return relative

    def resolve(self, path: str) -> Path:
        """저장된 경로 -> 실제 경로 (업로드 루트 밖은 거부)"""
        target = (self.root / self.relative_path(path)).resolve()
        if self.root.resolve() not in target.parents:
            raise AttachmentIOError(f"Attachment path outside upload root: {path}")
        return target

    async def save(self, content: bytes, original_name: str, mime_type: Optional[str] = None) -> AttachmentRef:
        filename = f"{int(time.time() * 1000)}-{sanitize_filename(original_name)}"
        relative = f"{self.subdir}/{filename}"
        target = self.directory / filename

        try:
            await aiofiles.os.makedirs(self.directory, exist_ok=True)
            # 'x' 모드: 이미 있으면 덮어쓰지 않음
            async with aiofiles.open(target, "xb") as fh:
                await fh.write(content)
        except FileExistsError:
            raise AttachmentConflictError(f"Attachment already exists: {relative}")
        except OSError as e:
            logger.error(f" 첨부파일 저장 실패: {relative} ({e})")
            if await aiofiles.os.path.exists(target):
                await aiofiles.os.remove(target)
            raise AttachmentIOError(f"Failed to save attachment: {e}")

        logger.info(f" 첨부파일 저장: {relative} ({len(content)} bytes)")
        return AttachmentRef(path=relative, name=original_name, mime_type=mime_type)

    async def delete(self, path: Optional[str]) -> bool:
        """파일 삭제 - 없으면 아무것도 하지 않음"""
        if not path:
            return False
        target = self.resolve(path)
        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f" 첨부파일 삭제 실패: {path} ({e})")
            raise AttachmentIOError(f"Failed to delete attachment: {e}")
        logger.info(f"🗑️ 첨부파일 삭제: {path}")
        return True

    async def list_files(self) -> List[Tuple[str, datetime]]:
        if not await aiofiles.os.path.isdir(self.directory):
            return []
        files = []
        with await aiofiles.os.scandir(self.directory) as entries:
            for entry in entries:
                if entry.is_file():
                    stat = await aiofiles.os.stat(entry.path)
                    files.append((f"{self.subdir}/{entry.name}", datetime.fromtimestamp(stat.st_mtime)))
        return files
