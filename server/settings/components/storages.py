"""Django storage configuration for the local content store.

Uploaded file bytes and their thumbnails live in a single directory
(``FOLDER_PATH``), one blob per upload named by a random id.
"""

from typing import Any, Final

from server.settings.components import config

FILES_STORAGE_PATH: Final = config(
    'FOLDER_PATH',
    default='/tmp/files_manager',  # noqa: S108
)

# Uses local file system storage for user files and static files
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.files.infrastructure.storage.ContentStorage',
        'OPTIONS': {
            'location': FILES_STORAGE_PATH,
        },
    },
    'staticfiles': {
        # Keep static files separate from user files
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
