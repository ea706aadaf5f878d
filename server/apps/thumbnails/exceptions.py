"""Exceptions for thumbnails app."""

from server.apps.core.exceptions import InternalError


class QueueNotConfiguredError(InternalError):
    """Raised when an image is uploaded but no job queue is configured."""

    default_message = 'Thumbnail queue is not configured'


class JobError(Exception):
    """Base class for errors terminating a thumbnail job."""

    stage = 'process'


class JobValidationError(JobError):
    """Raised when a job payload lacks ``userId`` or ``fileId``."""

    stage = 'validate'


class JobFileNotFoundError(JobError):
    """Raised when the job's file record doesn't exist for its user."""

    stage = 'lookup'


class ThumbnailGenerationError(JobError):
    """Raised when any of the thumbnails can't be produced."""

    stage = 'generate'
