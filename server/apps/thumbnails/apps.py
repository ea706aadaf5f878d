"""Django app configuration for thumbnails app."""

from django.apps import AppConfig


class ThumbnailsConfig(AppConfig):
    """Configuration for thumbnails app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.thumbnails'
    verbose_name = 'Thumbnails'
