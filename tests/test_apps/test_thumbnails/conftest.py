"""Shared fixtures for thumbnails app tests."""

import pytest

from server.apps.files.infrastructure.storage import get_content_storage
from server.apps.files.models import File, FileType


@pytest.fixture
def image_file(user, image_bytes):
    """Create an image record with stored content.

    Returns:
        Image File instance.
    """
    return File.objects.create(
        user=user,
        name='photo.png',
        type=FileType.IMAGE,
        local_path=get_content_storage().save_content(image_bytes),
    )
