"""Business logic for registration and session authentication."""

import logging

from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError, transaction

from server.apps.accounts.infrastructure.credentials import decode_basic_auth
from server.apps.accounts.infrastructure.session_store import (
    SessionStore,
    get_session_store,
)
from server.apps.core.exceptions import AuthError, ConflictError, ValidationError

User = get_user_model()
logger = logging.getLogger(__name__)


def register_user(email: str | None, password: str | None) -> User:
    """Create a user account.

    The email doubles as the username. Only the password hash is stored.

    Args:
        email: Account email, must be unique.
        password: Plaintext password.

    Returns:
        Created User instance.

    Raises:
        ValidationError: If email or password is missing.
        ConflictError: If the email is already registered.
    """
    if not email:
        raise ValidationError('Missing email')
    if not password:
        raise ValidationError('Missing password')

    if User.objects.filter(email=email).exists():
        logger.info('Registration rejected, email taken: %s', email)
        raise ConflictError('Already exist')

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=email,
                email=email,
                password=password,
            )
    except IntegrityError as exc:
        # Lost a race against a concurrent registration
        raise ConflictError('Already exist') from exc

    logger.info('User registered: %s (ID: %d)', email, user.id)
    return user


def login(
    authorization: str | None,
    store: SessionStore | None = None,
) -> str:
    """Sign a user in from a Basic ``Authorization`` header.

    Args:
        authorization: Raw ``Authorization`` header value.
        store: Session store, process default when omitted.

    Returns:
        New session token valid for the store's TTL.

    Raises:
        AuthError: If the header is malformed or credentials don't match.
    """
    email, password = decode_basic_auth(authorization)

    user = authenticate(username=email, password=password)
    if user is None:
        logger.warning('Authentication failed for user: %s', email)
        raise AuthError

    store = store or get_session_store()
    return store.issue(user.id)


def logout(token: str | None, store: SessionStore | None = None) -> None:
    """Sign out by revoking the token.

    Args:
        token: Session token.
        store: Session store, process default when omitted.

    Raises:
        AuthError: If the token is missing or unknown.
    """
    store = store or get_session_store()
    resolve_session(token, store)
    if not store.revoke(token):
        # Expired between the lookup and the delete
        raise AuthError


def resolve_session(
    token: str | None,
    store: SessionStore | None = None,
) -> int:
    """Resolve a token to the id of its user.

    Args:
        token: Session token.
        store: Session store, process default when omitted.

    Returns:
        User id.

    Raises:
        AuthError: If the token is missing, unknown or expired.
    """
    if not token:
        raise AuthError

    store = store or get_session_store()
    user_id = store.resolve(token)
    if user_id is None:
        raise AuthError

    try:
        return int(user_id)
    except ValueError as exc:
        logger.warning('Session %s holds invalid user id', token[:8])
        raise AuthError from exc


def get_current_user(
    token: str | None,
    store: SessionStore | None = None,
) -> User:
    """Get the user signed in with the token.

    A session pointing at a deleted user counts as unauthenticated.

    Args:
        token: Session token.
        store: Session store, process default when omitted.

    Returns:
        User instance.

    Raises:
        AuthError: If the session or its user doesn't exist.
    """
    user_id = resolve_session(token, store)
    try:
        return User.objects.get(id=user_id)
    except User.DoesNotExist as exc:
        logger.warning('Session points to missing user: ID=%d', user_id)
        raise AuthError from exc
