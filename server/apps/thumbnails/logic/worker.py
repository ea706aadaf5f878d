"""Queue consumer running thumbnail jobs with bounded concurrency."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Final, final

from django.db import close_old_connections

from server.apps.core.exceptions import StoreError
from server.apps.thumbnails.exceptions import JobError
from server.apps.thumbnails.infrastructure.job_queue import Job, JobQueue
from server.apps.thumbnails.logic.thumbnail_operations import (
    process_thumbnail_job,
)

logger = logging.getLogger(__name__)

_DEFAULT_POLL_TIMEOUT: Final = 5.0


@final
class ThumbnailWorker:
    """Consumes the thumbnail queue with a fixed number of threads.

    Each thread takes one job at a time, so at most ``concurrency``
    jobs run at once. Every job ends either completed or failed in the
    queue; failures are logged with the job's file and user.
    """

    def __init__(
        self,
        job_queue: JobQueue,
        concurrency: int = 2,
        poll_timeout: float = _DEFAULT_POLL_TIMEOUT,
    ) -> None:
        """Initialize the worker.

        Args:
            job_queue: Queue to consume.
            concurrency: Number of consumer threads.
            poll_timeout: Seconds a thread waits for a job per poll.
        """
        if concurrency < 1:
            raise ValueError('Worker concurrency must be at least 1')
        self._queue = job_queue
        self._concurrency = concurrency
        self._poll_timeout = poll_timeout
        self._stop_event = threading.Event()

    def run(self, burst: bool = False) -> int:
        """Consume jobs until stopped.

        Args:
            burst: Return once the queue is empty instead of waiting.

        Returns:
            Number of jobs handled (completed or failed).
        """
        logger.info(
            'Thumbnail worker started on %s (concurrency: %d)',
            self._queue.name,
            self._concurrency,
        )
        with ThreadPoolExecutor(
            max_workers=self._concurrency,
            thread_name_prefix='thumbnail-worker',
        ) as pool:
            consumers = [
                pool.submit(self._consume, burst)
                for _ in range(self._concurrency)
            ]
            try:
                handled = sum(
                    consumer.result() for consumer in as_completed(consumers)
                )
            except KeyboardInterrupt:
                # Let consumers finish their current job before the pool joins
                self.stop()
                raise
            except Exception:
                logger.exception('Thumbnail consumer crashed on %s', self._queue.name)
                self.stop()
                raise

        logger.info('Thumbnail worker stopped, %d jobs handled', handled)
        return handled

    def stop(self) -> None:
        """Ask all consumer threads to exit after their current job."""
        self._stop_event.set()

    def handle(self, job: Job) -> bool:
        """Run one job and record its outcome in the queue.

        Args:
            job: Job taken from the queue.

        Returns:
            True if the job completed, False if it failed.
        """
        user_id = job.data.get('userId')
        file_id = job.data.get('fileId')
        try:
            process_thumbnail_job(job.data)
        except JobError as exc:
            logger.exception(
                'Thumbnail job %s failed at %s: fileId=%s, userId=%s',
                job.id,
                exc.stage,
                file_id,
                user_id,
            )
            self._queue.fail(job, str(exc))
            return False
        except Exception as exc:
            logger.exception(
                'Thumbnail job %s crashed: fileId=%s, userId=%s',
                job.id,
                file_id,
                user_id,
            )
            self._queue.fail(job, repr(exc))
            return False

        self._queue.complete(job)
        logger.info('Thumbnail job %s completed: fileId=%s', job.id, file_id)
        return True

    def _consume(self, burst: bool) -> int:
        handled = 0
        timeout = None if burst else self._poll_timeout
        while not self._stop_event.is_set():
            try:
                job = self._queue.dequeue(timeout=timeout)
            except StoreError:
                logger.exception('Failed to take a job from %s', self._queue.name)
                if burst:
                    break
                # Back off before retrying an unreachable queue
                self._stop_event.wait(self._poll_timeout)
                continue

            if job is None:
                if burst:
                    break
                continue

            try:
                self.handle(job)
            except StoreError:
                # The job stays in processing until requeued
                logger.exception(
                    'Failed to record outcome of job %s on %s',
                    job.id,
                    self._queue.name,
                )
            # Worker threads hold their own connections, drop broken ones
            close_old_connections()
            handled += 1
        return handled
