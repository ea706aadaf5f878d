"""Tests for the local content store."""

from pathlib import Path

from server.apps.files.infrastructure.storage import (
    ContentStorage,
    get_content_storage,
)


def test_default_storage_is_content_storage(content_dir):
    """Test that STORAGES points at the temporary directory."""
    storage = get_content_storage()

    assert isinstance(storage, ContentStorage)
    assert Path(storage.location) == content_dir


def test_save_content(content_dir):
    """Test that uploads get random names inside the store."""
    storage = get_content_storage()

    local_path = storage.save_content(b'hello')

    assert Path(local_path).parent == content_dir
    assert Path(local_path).read_bytes() == b'hello'


def test_save_content_unique_names():
    """Test that identical uploads never share a blob."""
    storage = get_content_storage()

    paths = {storage.save_content(b'same') for _ in range(20)}

    assert len(paths) == 20


def test_save_variant_replaces_existing():
    """Test that regenerating a thumbnail overwrites it in place."""
    storage = get_content_storage()
    local_path = storage.save_content(b'original')

    first = storage.save_variant(local_path, 100, b'v1')
    second = storage.save_variant(local_path, 100, b'v2')

    assert first == second == f'{local_path}_100'
    assert Path(second).read_bytes() == b'v2'
    assert Path(local_path).read_bytes() == b'original'


def test_read_missing_returns_none(content_dir):
    """Test reading a path nothing was stored at."""
    storage = get_content_storage()

    assert storage.read(str(content_dir / 'missing')) is None


def test_read_outside_store_returns_none(tmp_path):
    """Test that paths outside the store are never read."""
    outside = tmp_path / 'secret.txt'
    outside.write_bytes(b'secret')

    assert get_content_storage().read(str(outside)) is None


def test_rollback_upload_deletes_content():
    """Test rollback of an upload."""
    storage = get_content_storage()
    local_path = storage.save_content(b'orphan')

    storage.rollback_upload(local_path)

    assert not Path(local_path).exists()


def test_rollback_upload_missing_file_is_silent(content_dir):
    """Test that rollback of an absent file doesn't raise."""
    get_content_storage().rollback_upload(str(content_dir / 'missing'))
