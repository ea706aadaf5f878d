"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Local content store for uploaded bytes and thumbnails
- Metadata helpers (MIME type, content decoding, request values)

Keep infrastructure concerns separate from business logic.
"""
