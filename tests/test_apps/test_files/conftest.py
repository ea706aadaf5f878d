"""Shared fixtures for files app tests."""

import pytest

from server.apps.files.models import File, FileType


@pytest.fixture
def folder(user, db):
    """Create a top-level folder for the test user.

    Returns:
        Folder File instance.
    """
    return File.objects.create(
        user=user,
        name='documents',
        type=FileType.FOLDER,
    )
