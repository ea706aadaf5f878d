"""Custom storage backend for the local content store."""

import logging
import uuid
from pathlib import Path
from typing import Any, final, override

from django.core.files.base import ContentFile
from django.core.files.storage import FileSystemStorage, default_storage

from server.apps.files.infrastructure.metadata import variant_path

logger = logging.getLogger(__name__)


@final
class ContentStorage(FileSystemStorage):
    """File system storage for uploaded content.

    Extends Django's FileSystemStorage with:
    - Random, collision-resistant names for uploads
    - Width-suffixed thumbnail variants beside the original
    - Transaction rollback support for failed DB operations
    - Enhanced error logging

    Records keep the absolute path returned by ``save_content``;
    the helpers below accept those paths.
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file with error handling and logging.

        Args:
            name: Storage name for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage name used (may differ from name if conflicts).

        Raises:
            OSError: If writing fails.
        """
        try:
            logger.debug('Writing file to storage: %s', name)
            saved_name = super().save(name, content, max_length)
        except Exception:
            logger.exception('Failed to write file to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete file with error handling and logging.

        Args:
            name: Storage name of file to delete.

        Raises:
            OSError: If deleting fails.
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def save_content(self, content: bytes) -> str:
        """Store uploaded bytes under a fresh random name.

        Args:
            content: Raw bytes.

        Returns:
            Absolute path of the stored content.
        """
        name = str(uuid.uuid4())
        saved_name = self.save(name, ContentFile(content))
        logger.info('Content stored: %s (%d bytes)', saved_name, len(content))
        return self.path(saved_name)

    def save_variant(self, local_path: str, width: int, content: bytes) -> str:
        """Store a thumbnail beside the original, replacing an older one.

        Args:
            local_path: Absolute path of the original content.
            width: Thumbnail width used as suffix.
            content: Thumbnail bytes.

        Returns:
            Absolute path of the thumbnail.
        """
        name = self.name_for(variant_path(local_path, width))
        if self.exists(name):
            self.delete(name)
        saved_name = self.save(name, ContentFile(content))
        return self.path(saved_name)

    def read(self, local_path: str) -> bytes | None:
        """Read stored content.

        Args:
            local_path: Absolute path of the content.

        Returns:
            Content bytes, or None if nothing is stored there.
        """
        try:
            name = self.name_for(local_path)
        except ValueError:
            logger.warning('Path outside of content store: %s', local_path)
            return None

        if not self.exists(name):
            return None
        with self.open(name, 'rb') as stored:
            return stored.read()

    def delete_path(self, local_path: str) -> None:
        """Delete stored content by absolute path, if present.

        Args:
            local_path: Absolute path of the content.
        """
        name = self.name_for(local_path)
        if self.exists(name):
            self.delete(name)

    def rollback_upload(self, local_path: str) -> None:
        """Delete uploaded content for DB transaction rollback.

        This is a best-effort operation - if deletion fails, the error
        is logged but not raised, as the DB rollback has already occurred.

        Args:
            local_path: Absolute path of the content to delete.
        """
        try:
            logger.warning('Rolling back upload, deleting file: %s', local_path)
            self.delete_path(local_path)
        except Exception:
            # The file will remain in storage but not in database
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                local_path,
            )

    def name_for(self, local_path: str) -> str:
        """Convert an absolute path into a storage name.

        Args:
            local_path: Absolute path inside the storage location.

        Returns:
            Name relative to the storage location.

        Raises:
            ValueError: If the path is outside the storage location.
        """
        return str(Path(local_path).relative_to(self.location))


def get_content_storage() -> ContentStorage:
    """Get the configured default storage backend.

    Returns:
        ContentStorage instance configured from ``STORAGES``.
    """
    return default_storage  # type: ignore[return-value]
