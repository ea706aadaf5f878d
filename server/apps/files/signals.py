"""Signal handlers for files app."""

import logging

from django.conf import settings
from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.files.infrastructure.metadata import variant_path
from server.apps.files.infrastructure.storage import get_content_storage
from server.apps.files.models import File

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=File)
def delete_content_from_storage(
    sender: type[File],
    instance: File,
    **kwargs: object,
) -> None:
    """Delete content and thumbnails when a File record is deleted.

    Records are only deleted from the admin or the ORM; this keeps the
    content store free of blobs nobody references.

    Args:
        sender: The File model class.
        instance: The File instance being deleted.
        **kwargs: Additional signal arguments.
    """
    if not instance.local_path:
        return

    storage = get_content_storage()
    paths = [instance.local_path] + [
        variant_path(instance.local_path, width)
        for width in settings.THUMBNAIL_WIDTHS
    ]
    for path in paths:
        try:
            storage.delete_path(path)
        except Exception:
            # Log error but don't raise - DB delete already succeeded
            logger.exception(
                'Failed to delete content from storage (orphaned): %s',
                path,
            )
