"""Business logic for file operations."""

import logging
from dataclasses import dataclass
from functools import partial
from typing import Final

from django.conf import settings
from django.db import transaction

from server.apps.core.exceptions import NotFoundError, StoreError, ValidationError
from server.apps.files.exceptions import (
    FolderHasNoContentError,
    ParentNotFolderError,
    ParentNotFoundError,
)
from server.apps.files.infrastructure.metadata import (
    decode_content,
    detect_mime_type,
    parse_page,
    parse_record_id,
    variant_path,
)
from server.apps.files.infrastructure.storage import get_content_storage
from server.apps.files.models import ROOT_PARENT_ID, File, FileType
from server.apps.thumbnails.infrastructure.job_queue import (
    JobQueue,
    require_job_queue,
)

logger = logging.getLogger(__name__)

_FILE_TYPES: Final = frozenset(FileType.values)

# Largest row offset the database accepts (signed 64-bit)
_MAX_OFFSET: Final = 2**63 - 1


@dataclass(frozen=True, slots=True)
class FileContent:
    """Bytes of a stored file with their MIME type."""

    content: bytes
    content_type: str


def create_file(  # noqa: WPS211
    owner_id: int,
    name: str | None,
    file_type: str | None,
    parent_id: object = ROOT_PARENT_ID,
    is_public: bool = False,
    data: str | None = None,
) -> File:
    """Create a folder, or upload a file or image.

    Transaction safety: Content is written to storage first, then the
    DB record is created. If the DB transaction fails, the written
    content is deleted (rollback).

    Images get a thumbnail job once the record is committed. A
    configured queue that fails to accept the job doesn't fail the
    upload.

    Args:
        owner_id: Id of the uploading user.
        name: Record name.
        file_type: One of ``folder``, ``file``, ``image``.
        parent_id: Id of the containing folder, ``'0'`` for the root.
        is_public: Initial visibility, anything but ``True`` is private.
        data: Base64 content, required unless creating a folder.

    Returns:
        Created File instance.

    Raises:
        ValidationError: If a field is missing or the parent is invalid.
        InternalError: If an image is uploaded with no queue configured.
    """
    if not name:
        raise ValidationError('Missing name')
    if not isinstance(file_type, str) or file_type not in _FILE_TYPES:
        raise ValidationError('Missing type')
    if not data and file_type != FileType.FOLDER:
        raise ValidationError('Missing data')

    parent = _get_parent_folder(parent_id)

    job_queue = None
    if file_type == FileType.IMAGE:
        job_queue = require_job_queue()

    local_path = ''
    if file_type != FileType.FOLDER:
        local_path = get_content_storage().save_content(decode_content(data))

    try:
        with transaction.atomic():
            file_instance = File.objects.create(
                user_id=owner_id,
                name=name,
                type=file_type,
                is_public=is_public is True,
                parent=parent,
                local_path=local_path,
            )
    except Exception:
        logger.exception('Database transaction failed for upload: %s', name)
        if local_path:
            get_content_storage().rollback_upload(local_path)
        raise

    logger.info(
        'File record created: %s (ID: %d, type: %s)',
        name,
        file_instance.id,
        file_type,
    )

    if job_queue is not None:
        # The worker must find the record, so queue only after commit
        transaction.on_commit(
            partial(_enqueue_thumbnail_job, job_queue, owner_id, file_instance.id),
        )

    return file_instance


def _enqueue_thumbnail_job(job_queue: JobQueue, owner_id: int, file_id: int) -> None:
    try:
        job_queue.enqueue({
            'userId': str(owner_id),
            'fileId': str(file_id),
        })
    except StoreError:
        logger.exception('Failed to enqueue thumbnail job: fileId=%d', file_id)


def _get_parent_folder(parent_id: object) -> File | None:
    """Resolve the parent of a new record.

    The parent may belong to any user.

    Args:
        parent_id: Requested parent id, ``'0'`` for the root.

    Returns:
        Parent folder, or None for the root.

    Raises:
        ParentNotFoundError: If no record has the id.
        ParentNotFolderError: If the record isn't a folder.
    """
    if parent_id is None or str(parent_id) == ROOT_PARENT_ID:
        return None

    record_id = parse_record_id(parent_id)
    if record_id is None:
        raise ParentNotFoundError

    parent = File.objects.filter(id=record_id).first()
    if parent is None:
        raise ParentNotFoundError
    if not parent.is_folder:
        raise ParentNotFolderError
    return parent


def get_file(owner_id: int, file_id: object) -> File:
    """Get one of the owner's records.

    Records of other users are reported exactly like missing ones.

    Args:
        owner_id: Id of the requesting user.
        file_id: Record id.

    Returns:
        File instance.

    Raises:
        NotFoundError: If the owner has no record with the id.
    """
    record_id = parse_record_id(file_id)
    if record_id is None:
        raise NotFoundError

    file_instance = File.objects.filter(id=record_id, user_id=owner_id).first()
    if file_instance is None:
        raise NotFoundError
    return file_instance


def list_files(
    owner_id: int,
    parent_id: object = ROOT_PARENT_ID,
    page: object = 0,
) -> list[File]:
    """List one page of the owner's records under a parent.

    Pages hold ``FILES_PAGE_SIZE`` records in insertion order. Pages
    past the end are empty.

    Args:
        owner_id: Id of the requesting user.
        parent_id: Parent id, ``'0'`` for the root.
        page: Zero-based page number.

    Returns:
        List of File instances, possibly empty.
    """
    page_size = settings.FILES_PAGE_SIZE
    queryset = File.objects.filter(user_id=owner_id)

    if parent_id is None or str(parent_id) == ROOT_PARENT_ID:
        queryset = queryset.filter(parent__isnull=True)
    else:
        record_id = parse_record_id(parent_id)
        if record_id is None:
            return []
        queryset = queryset.filter(parent_id=record_id)

    offset = parse_page(page) * page_size
    if offset > _MAX_OFFSET - page_size:
        return []

    logger.debug(
        'Listing files: user=%d, parent=%s, offset=%d',
        owner_id,
        parent_id,
        offset,
    )
    return list(queryset.order_by('id')[offset:offset + page_size])


def set_public(owner_id: int, file_id: object, is_public: bool) -> File:
    """Publish or unpublish one of the owner's records.

    Setting the current value again is a no-op that still succeeds.

    Args:
        owner_id: Id of the requesting user.
        file_id: Record id.
        is_public: New visibility.

    Returns:
        Updated File instance.

    Raises:
        NotFoundError: If the owner has no record with the id.
    """
    file_instance = get_file(owner_id, file_id)
    file_instance.is_public = is_public
    file_instance.save(update_fields=['is_public'])
    logger.info(
        'File visibility changed: ID=%d, public=%s',
        file_instance.id,
        is_public,
    )
    return file_instance


def get_file_content(
    viewer_id: int | None,
    file_id: object,
    size: object = None,
) -> FileContent:
    """Read the content of a record, or of one of its thumbnails.

    Public records are readable by anyone. Private ones only by their
    owner; everyone else gets the same error as for a missing record.

    Args:
        viewer_id: Id of the requesting user, None if anonymous.
        file_id: Record id.
        size: Optional thumbnail width (one of ``THUMBNAIL_WIDTHS``).

    Returns:
        FileContent with the bytes and a MIME type from the record name.

    Raises:
        NotFoundError: If the record, the variant or the content is missing
            or the viewer may not see it.
        FolderHasNoContentError: If the record is a folder.
    """
    record_id = parse_record_id(file_id)
    if record_id is None:
        raise NotFoundError

    file_instance = File.objects.filter(id=record_id).first()
    if file_instance is None:
        raise NotFoundError
    if file_instance.is_folder:
        raise FolderHasNoContentError
    if not file_instance.is_public and viewer_id != file_instance.user_id:
        raise NotFoundError

    path = file_instance.local_path
    if size not in {None, ''}:
        path = variant_path(path, _get_thumbnail_width(size))

    content = get_content_storage().read(path)
    if content is None:
        logger.warning('Content missing for file ID=%d: %s', record_id, path)
        raise NotFoundError

    return FileContent(
        content=content,
        content_type=detect_mime_type(file_instance.name),
    )


def _get_thumbnail_width(size: object) -> int:
    """Validate a requested thumbnail width.

    Args:
        size: Width as received from the client.

    Returns:
        Width from ``THUMBNAIL_WIDTHS``.

    Raises:
        NotFoundError: If no thumbnail of that width is ever generated.
    """
    try:
        width = int(str(size))
    except ValueError as exc:
        raise NotFoundError from exc
    if width not in settings.THUMBNAIL_WIDTHS:
        raise NotFoundError
    return width
