"""Business logic layer for thumbnails app.

- Processing of a single thumbnail job
- Worker consuming the job queue with bounded concurrency
"""
