"""Django admin configuration for files app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.files.models import File


@admin.register(File)
class FileAdmin(admin.ModelAdmin[File]):
    """Admin interface for File model."""

    list_display = [
        'name',
        'user',
        'type',
        'is_public',
        'parent_display',
        'created_at',
    ]

    list_filter = [
        'type',
        'is_public',
        'user',
    ]

    search_fields = [
        'name',
        'user__email',
    ]

    readonly_fields = [
        'user',
        'type',
        'parent',
        'local_path',
        'created_at',
    ]

    fieldsets = (
        ('File Information', {
            'fields': ('name', 'user', 'type', 'parent'),
        }),
        ('Visibility', {
            'fields': ('is_public',),
        }),
        ('Content', {
            'fields': ('local_path',),
        }),
        ('Timestamps', {
            'fields': ('created_at',),
        }),
    )

    def parent_display(self, obj: File) -> str:
        """Display the parent folder name.

        Args:
            obj: File instance.

        Returns:
            Parent name, or '/' for top-level records.
        """
        if obj.parent is None:
            return '/'
        return obj.parent.name
    parent_display.short_description = 'Parent'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user', 'parent')
