"""HTTP Basic credential decoding."""

import base64
import binascii
from typing import Final

from server.apps.core.exceptions import AuthError

_BASIC_SCHEME: Final = 'basic'


def decode_basic_auth(authorization: str | None) -> tuple[str, str]:
    """Extract email and password from a Basic ``Authorization`` header.

    The header value is ``Basic base64(email:password)``. The password
    may itself contain ``:``, only the first one separates the fields.

    Args:
        authorization: Raw header value.

    Returns:
        Tuple of (email, password).

    Raises:
        AuthError: If the header is absent, malformed or a field is empty.
    """
    if not authorization:
        raise AuthError

    scheme, _, encoded = authorization.strip().partition(' ')
    if scheme.lower() != _BASIC_SCHEME or not encoded:
        raise AuthError

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise AuthError from exc

    email, separator, password = decoded.partition(':')
    if not separator or not email or not password:
        raise AuthError
    return email, password
