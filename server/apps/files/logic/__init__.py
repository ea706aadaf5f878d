"""Business logic layer for files app.

This package contains all business logic for the file hierarchy:
- Upload of files, images and folders
- Owner scoped lookup, listing and pagination
- Publishing and content access

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
