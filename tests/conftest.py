"""
CSO Admin Service - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

# Set testing environment (before the app reads settings)
os.environ['ENVIRONMENT'] = 'test'
os.environ['DEBUG'] = 'false'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///:memory:'
os.environ['UPLOAD_ROOT'] = tempfile.mkdtemp(prefix='cso-uploads-')
os.environ['SCHEDULER_ENABLED'] = 'false'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['TRACK_BROADCAST_READS'] = 'false'

from app.main import app
from app.auth import create_access_token
from app.config import settings
from app.models import Database, Staff
from app.services.attachment_service import AttachmentStore, UploadPayload


@pytest.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """Fresh SQLite file database per test"""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
async def session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture
def letter_store(tmp_path) -> AttachmentStore:
    return AttachmentStore(
        str(tmp_path / 'public'),
        settings.letter_upload_dir,
        settings.allowed_attachment_extensions,
        settings.max_upload_size
    )


@pytest.fixture
def news_store(tmp_path) -> AttachmentStore:
    return AttachmentStore(
        str(tmp_path / 'public'),
        settings.news_upload_dir,
        settings.allowed_image_extensions,
        settings.max_upload_size
    )


@pytest.fixture
def hero_store(tmp_path) -> AttachmentStore:
    return AttachmentStore(
        str(tmp_path / 'public'),
        settings.hero_upload_dir,
        settings.allowed_image_extensions,
        settings.max_upload_size
    )


@pytest.fixture
async def client(database, letter_store, news_store, hero_store) -> AsyncGenerator[AsyncClient, None]:
    """Test client wired to the per-test database and upload stores"""
    state = app.state
    original = (state.database, state.letter_attachments, state.news_images, state.hero_images)
    state.database = database
    state.letter_attachments = letter_store
    state.news_images = news_store
    state.hero_images = hero_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    state.database, state.letter_attachments, state.news_images, state.hero_images = original


@pytest.fixture
async def staff(session: AsyncSession) -> Staff:
    member = Staff(name='Hana Tesfaye', email='hana@office.example.org', position='Program Officer')
    session.add(member)
    await session.commit()
    return member


@pytest.fixture
def auth_headers(staff: Staff) -> dict:
    token = create_access_token(staff.id)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def make_upload():
    """Factory for in-memory uploads"""
    def _make(filename: str = 'memo.pdf', content: bytes = b'%PDF-1.4 test', content_type: str = 'application/pdf') -> UploadPayload:
        return UploadPayload(content=content, filename=filename, content_type=content_type)
    return _make
