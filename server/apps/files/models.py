"""Database models for files app."""

from typing import Any, Final, final, override

from django.contrib.auth import get_user_model
from django.db import models

User = get_user_model()

# Serialized parent id of records living at the top level
ROOT_PARENT_ID: Final = '0'

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_TYPE_MAX_LENGTH: Final = 16
_LOCAL_PATH_MAX_LENGTH: Final = 1024


class FileType(models.TextChoices):
    """Kinds of records in the file hierarchy."""

    FOLDER = 'folder', 'Folder'
    FILE = 'file', 'File'
    IMAGE = 'image', 'Image'


@final
class File(models.Model):
    """File, image or folder owned by a user.

    Records form a forest per user: ``parent`` is NULL for top-level
    records and otherwise points at a folder. Files and images keep
    their bytes in the content store at ``local_path``; folders have
    no content.
    """

    # Owner relationship, never changes after creation
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    type = models.CharField(
        max_length=_TYPE_MAX_LENGTH,
        choices=FileType.choices,
    )

    is_public = models.BooleanField(default=False)

    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        related_name='children',
        null=True,
        blank=True,
        help_text='Containing folder, empty for the root',
    )

    local_path = models.CharField(
        max_length=_LOCAL_PATH_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Absolute path of the content, empty for folders',
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        # Insertion order
        ordering = ['id']

        indexes = [
            # Optimize directory listing queries
            models.Index(
                fields=['user', 'parent'],
                name='files_user_parent_idx',
            ),
        ]

        constraints = [
            # Content exists if and only if the record is not a folder
            models.CheckConstraint(
                condition=(
                    models.Q(type=FileType.FOLDER, local_path='') |
                    (~models.Q(type=FileType.FOLDER) & ~models.Q(local_path=''))
                ),
                name='files_local_path_matches_type',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.name}'

    @property
    def is_folder(self) -> bool:
        """Whether the record is a folder."""
        return self.type == FileType.FOLDER

    def get_parent_id(self) -> str:
        """Get the serialized parent id.

        Returns:
            Parent id as string, ``'0'`` for top-level records.
        """
        if self.parent_id is None:
            return ROOT_PARENT_ID
        return str(self.parent_id)

    def to_public_dict(self) -> dict[str, Any]:
        """Project the record for API responses.

        Returns:
            Dict with ``id, userId, name, type, isPublic, parentId``.
        """
        return {
            'id': str(self.id),
            'userId': str(self.user_id),
            'name': self.name,
            'type': self.type,
            'isPublic': self.is_public,
            'parentId': self.get_parent_id(),
        }
