"""Metadata and request value helpers for files."""

import base64
import binascii
import mimetypes
from typing import Final

from server.apps.core.exceptions import ValidationError

_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from the filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'text/plain').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def decode_content(data: str) -> bytes:
    """Decode base64 upload content.

    Args:
        data: Base64 encoded bytes.

    Returns:
        Raw bytes.

    Raises:
        ValidationError: If data is not valid base64.
    """
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, TypeError, ValueError) as error:
        raise ValidationError('Missing data') from error


def variant_path(local_path: str, width: int) -> str:
    """Build the path of a thumbnail derivative.

    Example: '/tmp/files_manager/3f2a...' -> '/tmp/files_manager/3f2a..._500'

    Args:
        local_path: Path of the original content.
        width: Thumbnail width.

    Returns:
        Width-suffixed path beside the original.
    """
    return f'{local_path}_{width}'


def parse_record_id(raw_id: object) -> int | None:
    """Parse a record id received from a client.

    Args:
        raw_id: Id as string or number.

    Returns:
        Positive integer id, or None if it can't refer to a record.
    """
    try:
        record_id = int(str(raw_id))
    except (TypeError, ValueError):
        return None
    if record_id <= 0:
        return None
    return record_id


def parse_page(raw_page: object) -> int:
    """Parse a zero-based page number.

    Args:
        raw_page: Page as string or number, may be None.

    Returns:
        Page number, 0 for missing, invalid or negative values.
    """
    try:
        page = int(str(raw_page))
    except (TypeError, ValueError):
        return 0
    return max(page, 0)
