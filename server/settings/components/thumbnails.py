"""Thumbnail job queue and worker settings."""

from server.settings.components import config
from server.settings.components.redis import SESSION_STORE_URL

# Empty value disables the queue; image uploads are refused then
THUMBNAIL_QUEUE_URL = config('THUMBNAIL_QUEUE_URL', default=SESSION_STORE_URL)
THUMBNAIL_QUEUE_NAME = config('THUMBNAIL_QUEUE_NAME', default='fileQueue')

# Widths of the derivatives written beside every image
THUMBNAIL_WIDTHS = (500, 250, 100)

# Number of jobs processed in parallel by one worker process
THUMBNAIL_WORKER_CONCURRENCY = config(
    'THUMBNAIL_WORKER_CONCURRENCY',
    cast=int,
    default=2,
)
