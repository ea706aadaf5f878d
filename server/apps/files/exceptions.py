"""Exceptions for files app."""

from server.apps.core.exceptions import ValidationError


class ParentNotFoundError(ValidationError):
    """Raised when the requested parent record doesn't exist."""

    default_message = 'Parent not found'


class ParentNotFolderError(ValidationError):
    """Raised when the requested parent exists but isn't a folder."""

    default_message = 'Parent is not a folder'


class FolderHasNoContentError(ValidationError):
    """Raised when reading the content of a folder."""

    default_message = "A folder doesn't have content"
