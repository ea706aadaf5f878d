"""Business logic for thumbnail generation."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from django.conf import settings

from server.apps.files.infrastructure.metadata import parse_record_id
from server.apps.files.infrastructure.storage import (
    ContentStorage,
    get_content_storage,
)
from server.apps.files.models import File
from server.apps.thumbnails.exceptions import (
    JobFileNotFoundError,
    JobValidationError,
    ThumbnailGenerationError,
)
from server.apps.thumbnails.infrastructure.imaging import resize_to_width

logger = logging.getLogger(__name__)


def process_thumbnail_job(payload: dict[str, Any]) -> list[str]:
    """Generate the thumbnails requested by a job.

    Args:
        payload: Job data with ``userId`` and ``fileId``.

    Returns:
        Paths of the written thumbnails.

    Raises:
        JobValidationError: If ``userId`` or ``fileId`` is missing.
        JobFileNotFoundError: If the user has no such file.
        ThumbnailGenerationError: If any thumbnail fails.
    """
    user_id = payload.get('userId')
    file_id = payload.get('fileId')
    if not user_id:
        raise JobValidationError('Missing userId')
    if not file_id:
        raise JobValidationError('Missing fileId')

    file_instance = _get_job_file(user_id, file_id)
    return generate_thumbnails(file_instance)


def _get_job_file(user_id: object, file_id: object) -> File:
    record_id = parse_record_id(file_id)
    owner_id = parse_record_id(user_id)
    file_instance = None
    if record_id is not None and owner_id is not None:
        file_instance = File.objects.filter(
            id=record_id,
            user_id=owner_id,
        ).first()

    if file_instance is None or file_instance.is_folder:
        raise JobFileNotFoundError('File not found')
    return file_instance


def generate_thumbnails(file_instance: File) -> list[str]:
    """Write every configured thumbnail beside the file's content.

    All widths are produced concurrently. If any of them fails, the
    ones already written are removed so a job leaves either all
    thumbnails or none. The original content is only read.

    Args:
        file_instance: File or image record.

    Returns:
        Paths of the written thumbnails, in ``THUMBNAIL_WIDTHS`` order.

    Raises:
        ThumbnailGenerationError: If the original is missing or any
            thumbnail can't be produced.
    """
    storage = get_content_storage()
    local_path = file_instance.local_path

    original = storage.read(local_path)
    if original is None:
        raise ThumbnailGenerationError(f'Content missing: {local_path}')

    widths = settings.THUMBNAIL_WIDTHS
    written: dict[int, str] = {}
    failures: list[tuple[int, Exception]] = []

    with ThreadPoolExecutor(max_workers=len(widths)) as pool:
        futures = {
            pool.submit(_write_thumbnail, storage, local_path, original, width): width
            for width in widths
        }
        for future in as_completed(futures):
            width = futures[future]
            try:
                written[width] = future.result()
            except Exception as exc:
                failures.append((width, exc))

    if failures:
        for path in written.values():
            storage.delete_path(path)
        failed_width, first_error = failures[0]
        raise ThumbnailGenerationError(
            f'Thumbnail {failed_width} failed for {local_path}: {first_error}',
        ) from first_error

    logger.info(
        'Thumbnails written for file ID=%d: %s',
        file_instance.id,
        sorted(written),
    )
    return [written[width] for width in widths]


def _write_thumbnail(
    storage: ContentStorage,
    local_path: str,
    original: bytes,
    width: int,
) -> str:
    return storage.save_variant(
        local_path,
        width,
        resize_to_width(original, width),
    )
