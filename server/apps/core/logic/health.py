"""Service health and usage statistics."""

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, connection

from server.apps.accounts.infrastructure.session_store import get_session_store
from server.apps.files.models import File

User = get_user_model()
logger = logging.getLogger(__name__)


def redis_is_alive() -> bool:
    """Check the session store connection.

    Returns:
        True if Redis answers.
    """
    return get_session_store().is_alive()


def db_is_alive() -> bool:
    """Check the database connection.

    Returns:
        True if a connection can be established.
    """
    try:
        connection.ensure_connection()
    except DatabaseError:
        logger.exception('Database is unreachable')
        return False
    return True


def get_stats() -> dict[str, int]:
    """Count users and file records.

    Returns:
        Dict with ``users`` and ``files`` counts.

    Raises:
        DatabaseError: If the counts can't be read.
    """
    return {
        'users': User.objects.count(),
        'files': File.objects.count(),
    }
