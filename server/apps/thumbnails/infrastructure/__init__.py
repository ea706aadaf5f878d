"""Infrastructure layer for thumbnails app.

- Redis list based job queue
- Image resizing with Pillow
"""
