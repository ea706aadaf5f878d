"""Infrastructure layer for accounts app.

- Redis session token store
- HTTP Basic credential decoding
"""
