"""Django app configuration for the file hierarchy."""

from typing import override

from django.apps import AppConfig


class FilesConfig(AppConfig):
    """Files, images and folders owned by users."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.files'
    verbose_name = 'File hierarchy'

    @override
    def ready(self) -> None:
        """Connect content cleanup to record deletion."""
        from server.apps.files import signals  # noqa: F401
