"""Redis-backed job queue for thumbnail generation.

Jobs live in three Redis structures derived from the queue name:

- ``<name>``: list of pending jobs, pushed left and consumed right
- ``<name>:processing``: jobs taken by a worker and not yet finished
- ``<name>:status``: hash of job id -> ``JobStatus``

Taking a job moves it atomically from the pending list to the
processing list, so a job whose worker dies is never lost: it stays in
the processing list until ``requeue_stalled`` puts it back. Delivery is
therefore at-least-once. Failed jobs are also appended to
``<name>:failed`` together with the error, and so are entries that
are not valid jobs; those are dropped on dequeue.
"""

import enum
import json
import logging
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Final, final

import redis
from django.conf import settings
from django.utils import timezone

from server.apps.core.exceptions import StoreError
from server.apps.core.infrastructure.redis_client import create_redis_client
from server.apps.thumbnails.exceptions import QueueNotConfiguredError

logger = logging.getLogger(__name__)

_PROCESSING_SUFFIX: Final = ':processing'
_STATUS_SUFFIX: Final = ':status'
_FAILED_SUFFIX: Final = ':failed'

_MALFORMED_ERROR: Final = 'Malformed job entry'


class JobStatus(enum.StrEnum):
    """Lifecycle of a job."""

    ENQUEUED = 'enqueued'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    FAILED = 'failed'


@dataclass(frozen=True, slots=True)
class Job:
    """Job taken from the queue.

    ``raw`` is the exact serialized entry, needed to remove it from the
    processing list.
    """

    id: str
    data: dict[str, Any]
    raw: str


@final
class JobQueue:
    """Named FIFO job queue stored in Redis."""

    def __init__(self, client: redis.Redis, name: str) -> None:
        """Initialize the queue.

        Args:
            client: Redis client (``decode_responses=True``).
            name: Queue name, prefix of all its keys.
        """
        self._client = client
        self._name = name
        self._processing_key = f'{name}{_PROCESSING_SUFFIX}'
        self._status_key = f'{name}{_STATUS_SUFFIX}'
        self._failed_key = f'{name}{_FAILED_SUFFIX}'

    @property
    def name(self) -> str:
        """Queue name."""
        return self._name

    def connect(self) -> None:
        """Verify the connection to Redis.

        Raises:
            StoreError: If Redis can't be reached.
        """
        try:
            self._client.ping()
        except redis.RedisError as exc:
            logger.exception('Job queue %s is unreachable', self._name)
            raise StoreError('Job queue is unavailable') from exc

    def enqueue(self, data: dict[str, Any]) -> str:
        """Add a job to the queue.

        Returns as soon as the job is stored; processing happens later.

        Args:
            data: JSON serializable job payload.

        Returns:
            Id of the new job.

        Raises:
            StoreError: If Redis fails.
        """
        job_id = uuid.uuid4().hex
        entry = json.dumps({
            'id': job_id,
            'data': data,
            'enqueuedAt': timezone.now().isoformat(),
        })
        try:
            pipe = self._client.pipeline()
            pipe.hset(self._status_key, job_id, JobStatus.ENQUEUED)
            pipe.lpush(self._name, entry)
            pipe.execute()
        except redis.RedisError as exc:
            raise StoreError(f'Failed to enqueue job on {self._name}') from exc

        logger.info('Job enqueued on %s: %s %s', self._name, job_id, data)
        return job_id

    def dequeue(self, timeout: float | None = None) -> Job | None:
        """Take the oldest pending job and mark it as processing.

        Malformed entries met on the way are moved to the failed list.

        Args:
            timeout: Seconds to wait for a job. None returns immediately.

        Returns:
            The job, or None if the queue stayed empty.

        Raises:
            StoreError: If Redis fails.
        """
        while True:
            raw = self._take(timeout)
            if raw is None:
                return None

            job = _decode_entry(raw)
            if job is None:
                self._discard(raw)
                continue

            self._set_status(job.id, JobStatus.PROCESSING)
            return job

    def complete(self, job: Job) -> None:
        """Mark a job as completed and drop it from processing.

        Args:
            job: Job returned by ``dequeue``.

        Raises:
            StoreError: If Redis fails.
        """
        try:
            pipe = self._client.pipeline()
            pipe.lrem(self._processing_key, 1, job.raw)
            pipe.hset(self._status_key, job.id, JobStatus.COMPLETED)
            pipe.execute()
        except redis.RedisError as exc:
            raise StoreError(f'Failed to complete job {job.id}') from exc

    def fail(self, job: Job, error: str) -> None:
        """Mark a job as failed and record the error.

        Failed jobs are not retried.

        Args:
            job: Job returned by ``dequeue``.
            error: Description of the failure.

        Raises:
            StoreError: If Redis fails.
        """
        record = json.dumps({
            'id': job.id,
            'data': job.data,
            'error': error,
            'failedAt': timezone.now().isoformat(),
        })
        try:
            pipe = self._client.pipeline()
            pipe.lrem(self._processing_key, 1, job.raw)
            pipe.hset(self._status_key, job.id, JobStatus.FAILED)
            pipe.rpush(self._failed_key, record)
            pipe.execute()
        except redis.RedisError as exc:
            raise StoreError(f'Failed to record failure of job {job.id}') from exc

    def get_status(self, job_id: str) -> JobStatus | None:
        """Get the status of a job.

        Args:
            job_id: Id returned by ``enqueue``.

        Returns:
            JobStatus, or None for unknown jobs.
        """
        try:
            status = self._client.hget(self._status_key, job_id)
        except redis.RedisError as exc:
            raise StoreError(f'Failed to read status of job {job_id}') from exc

        if status is None:
            return None
        return JobStatus(status)

    def pending_count(self) -> int:
        """Count jobs waiting to be processed."""
        return self._client.llen(self._name)

    def processing_count(self) -> int:
        """Count jobs taken by workers and not finished."""
        return self._client.llen(self._processing_key)

    def failed_jobs(self) -> list[dict[str, Any]]:
        """List recorded failures, oldest first.

        Returns:
            Dicts with ``id``, ``data``, ``error`` and ``failedAt``.
        """
        return [
            json.loads(record)
            for record in self._client.lrange(self._failed_key, 0, -1)
        ]

    def requeue_stalled(self) -> int:
        """Move every job left in processing back to the pending list.

        Only safe while no worker is running, otherwise jobs still being
        processed get delivered twice.

        Returns:
            Number of jobs requeued.
        """
        requeued = 0
        while True:
            raw = self._client.lmove(
                self._processing_key,
                self._name,
                'LEFT',
                'RIGHT',
            )
            if raw is None:
                break
            job = _decode_entry(raw)
            if job is not None:
                self._set_status(job.id, JobStatus.ENQUEUED)
            requeued += 1

        if requeued:
            logger.warning('Requeued %d stalled jobs on %s', requeued, self._name)
        return requeued

    def _take(self, timeout: float | None) -> str | None:
        try:
            if timeout is None:
                return self._client.lmove(
                    self._name,
                    self._processing_key,
                    'RIGHT',
                    'LEFT',
                )
            return self._client.blmove(
                self._name,
                self._processing_key,
                timeout,
                'RIGHT',
                'LEFT',
            )
        except redis.RedisError as exc:
            raise StoreError(f'Failed to dequeue job from {self._name}') from exc

    def _discard(self, raw: str) -> None:
        logger.error('Dropping malformed job entry from %s: %r', self._name, raw)
        record = json.dumps({
            'id': None,
            'data': None,
            'raw': raw,
            'error': _MALFORMED_ERROR,
            'failedAt': timezone.now().isoformat(),
        })
        try:
            pipe = self._client.pipeline()
            pipe.lrem(self._processing_key, 1, raw)
            pipe.rpush(self._failed_key, record)
            pipe.execute()
        except redis.RedisError as exc:
            raise StoreError(f'Failed to drop malformed entry from {self._name}') from exc

    def _set_status(self, job_id: str, status: JobStatus) -> None:
        try:
            self._client.hset(self._status_key, job_id, status)
        except redis.RedisError as exc:
            raise StoreError(f'Failed to update status of job {job_id}') from exc


def _decode_entry(raw: str) -> Job | None:
    try:
        entry = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(entry, dict) or not isinstance(entry.get('id'), str):
        return None

    data = entry.get('data')
    if not isinstance(data, dict):
        data = {}
    return Job(id=entry['id'], data=data, raw=raw)


@lru_cache
def get_job_queue() -> JobQueue | None:
    """Get the process-wide thumbnail queue.

    Returns:
        JobQueue built from ``THUMBNAIL_QUEUE_URL``, or None when the
        setting is empty.
    """
    if not settings.THUMBNAIL_QUEUE_URL:
        return None
    return JobQueue(
        create_redis_client(settings.THUMBNAIL_QUEUE_URL),
        name=settings.THUMBNAIL_QUEUE_NAME,
    )


def require_job_queue() -> JobQueue:
    """Get the thumbnail queue, failing when none is configured.

    Returns:
        JobQueue instance.

    Raises:
        QueueNotConfiguredError: If ``THUMBNAIL_QUEUE_URL`` is empty.
    """
    job_queue = get_job_queue()
    if job_queue is None:
        logger.error('Image upload refused: no thumbnail queue configured')
        raise QueueNotConfiguredError
    return job_queue
