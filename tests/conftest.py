"""Shared fixtures for all tests."""

import base64
from io import BytesIO

import fakeredis
import pytest
from django.contrib.auth import get_user_model
from PIL import Image

from server.apps.accounts.infrastructure import session_store
from server.apps.files.infrastructure.storage import get_content_storage
from server.apps.files.models import File, FileType
from server.apps.thumbnails.infrastructure import job_queue

User = get_user_model()


@pytest.fixture(autouse=True)
def _fast_password_hashing(settings):
    """Use a cheap hasher, PBKDF2 makes every user fixture slow."""
    settings.PASSWORD_HASHERS = [
        'django.contrib.auth.hashers.MD5PasswordHasher',
    ]


@pytest.fixture
def redis_server():
    """In-memory Redis server shared by all clients of a test.

    Returns:
        fakeredis FakeServer instance.
    """
    return fakeredis.FakeServer()


@pytest.fixture(autouse=True)
def redis_client(monkeypatch, redis_server):
    """Route every Redis connection to the fake server.

    Yields:
        Client connected to the same fake server as the stores.
    """
    def create_client(url: str) -> fakeredis.FakeRedis:
        return fakeredis.FakeRedis(server=redis_server, decode_responses=True)

    monkeypatch.setattr(session_store, 'create_redis_client', create_client)
    monkeypatch.setattr(job_queue, 'create_redis_client', create_client)
    session_store.get_session_store.cache_clear()
    job_queue.get_job_queue.cache_clear()

    yield create_client('redis://fake')

    session_store.get_session_store.cache_clear()
    job_queue.get_job_queue.cache_clear()


@pytest.fixture(autouse=True)
def content_dir(settings, tmp_path):
    """Point the content store at a temporary directory.

    Returns:
        Path of the content store directory.
    """
    storage_dir = tmp_path / 'files_manager'
    storage_dir.mkdir()
    settings.FILES_STORAGE_PATH = str(storage_dir)
    settings.STORAGES = {
        **settings.STORAGES,
        'default': {
            'BACKEND': 'server.apps.files.infrastructure.storage.ContentStorage',
            'OPTIONS': {'location': str(storage_dir)},
        },
    }
    return storage_dir


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='test@example.com',
        email='test@example.com',
        password='testpass123',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='other@example.com',
        email='other@example.com',
        password='testpass123',
    )


@pytest.fixture
def token(user):
    """Issue a session token for the test user.

    Returns:
        Token string.
    """
    return session_store.get_session_store().issue(user.id)


@pytest.fixture
def other_token(other_user):
    """Issue a session token for the second user.

    Returns:
        Token string.
    """
    return session_store.get_session_store().issue(other_user.id)


@pytest.fixture
def image_bytes():
    """PNG image of 800x600 pixels.

    Returns:
        Encoded image bytes.
    """
    buffer = BytesIO()
    Image.new('RGB', (800, 600), color=(200, 30, 60)).save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def image_data(image_bytes):
    """Base64 form of ``image_bytes`` as sent by API clients.

    Returns:
        Base64 string.
    """
    return base64.b64encode(image_bytes).decode('ascii')


@pytest.fixture
def text_data():
    """Base64 form of a short text file.

    Returns:
        Base64 string of ``Hello Webstack!\\n``.
    """
    return 'SGVsbG8gV2Vic3RhY2shCg=='


@pytest.fixture
def text_file(user, db):
    """Create a private text file with stored content.

    Returns:
        File instance whose content is ``test file content``.
    """
    local_path = get_content_storage().save_content(b'test file content')
    return File.objects.create(
        user=user,
        name='notes.txt',
        type=FileType.FILE,
        local_path=local_path,
    )
