"""Tests for the thumbnail worker."""

import itertools
import logging

import pytest

from server.apps.core.exceptions import StoreError
from server.apps.thumbnails.infrastructure.job_queue import JobQueue, JobStatus
from server.apps.thumbnails.logic import worker as worker_module
from server.apps.thumbnails.logic.worker import ThumbnailWorker


@pytest.fixture
def job_queue(redis_client):
    """Queue on the fake Redis server.

    Returns:
        JobQueue instance.
    """
    return JobQueue(redis_client, name='workerQueue')


@pytest.mark.django_db
def test_handle_completes_job(job_queue, user, image_file):
    """Test a successful job."""
    job_queue.enqueue({'userId': str(user.id), 'fileId': str(image_file.id)})
    job = job_queue.dequeue()

    assert ThumbnailWorker(job_queue).handle(job) is True

    assert job_queue.get_status(job.id) == JobStatus.COMPLETED
    assert job_queue.failed_jobs() == []


def test_handle_records_failure(job_queue, caplog, monkeypatch):
    """Test that failed jobs are logged with their stage and ids."""
    monkeypatch.setattr(logging.getLogger('server'), 'propagate', True)
    job_queue.enqueue({'fileId': '7'})
    job = job_queue.dequeue()

    assert ThumbnailWorker(job_queue).handle(job) is False

    assert job_queue.get_status(job.id) == JobStatus.FAILED
    assert job_queue.failed_jobs()[0]['error'] == 'Missing userId'
    assert 'failed at validate: fileId=7, userId=None' in caplog.text


def test_handle_unexpected_error(job_queue, monkeypatch):
    """Test that crashes still end the job as failed."""
    def crash(payload):
        raise RuntimeError('boom')

    monkeypatch.setattr(worker_module, 'process_thumbnail_job', crash)
    job_queue.enqueue({'userId': '1', 'fileId': '2'})
    job = job_queue.dequeue()

    assert ThumbnailWorker(job_queue).handle(job) is False

    assert 'boom' in job_queue.failed_jobs()[0]['error']


def test_run_burst_drains_queue(job_queue):
    """Test that burst mode handles every job and returns."""
    for index in range(5):
        job_queue.enqueue({'fileId': str(index)})

    handled = ThumbnailWorker(job_queue, concurrency=2).run(burst=True)

    assert handled == 5
    assert job_queue.pending_count() == 0
    assert job_queue.processing_count() == 0
    assert len(job_queue.failed_jobs()) == 5


def test_run_burst_empty_queue(job_queue):
    """Test burst mode on an empty queue."""
    assert ThumbnailWorker(job_queue).run(burst=True) == 0


def test_stopped_worker_takes_no_jobs(job_queue):
    """Test that a stopped worker leaves jobs pending."""
    job_queue.enqueue({'fileId': '1'})
    worker = ThumbnailWorker(job_queue)
    worker.stop()

    assert worker.run(burst=True) == 0
    assert job_queue.pending_count() == 1


def test_run_burst_skips_malformed_entry(job_queue, redis_client):
    """Test that an entry that isn't a job doesn't stop the worker."""
    redis_client.lpush(job_queue.name, 'not json')
    job_id = job_queue.enqueue({'fileId': '1'})

    handled = ThumbnailWorker(job_queue, concurrency=1).run(burst=True)

    assert handled == 1
    assert job_queue.get_status(job_id) == JobStatus.FAILED
    assert job_queue.processing_count() == 0
    errors = [record['error'] for record in job_queue.failed_jobs()]
    assert errors == ['Malformed job entry', 'Missing userId']


def test_run_burst_unreachable_queue(job_queue, redis_server, caplog, monkeypatch):
    """Test that a queue outage is logged instead of killing consumers."""
    monkeypatch.setattr(logging.getLogger('server'), 'propagate', True)
    redis_server.connected = False

    handled = ThumbnailWorker(job_queue, concurrency=2).run(burst=True)

    assert handled == 0
    assert 'Failed to take a job from workerQueue' in caplog.text


def test_outcome_store_failure_keeps_consuming(job_queue, monkeypatch):
    """Test that failing to record an outcome moves on to the next job."""
    def failing_fail(self, job, error):
        raise StoreError('queue down')

    monkeypatch.setattr(JobQueue, 'fail', failing_fail)
    job_queue.enqueue({'fileId': '1'})
    job_queue.enqueue({'fileId': '2'})

    handled = ThumbnailWorker(job_queue, concurrency=1).run(burst=True)

    assert handled == 2
    assert job_queue.pending_count() == 0
    assert job_queue.processing_count() == 2


def test_unreachable_queue_retries_until_stopped(job_queue, monkeypatch):
    """Test that a waiting worker backs off and retries after a failure."""
    worker = ThumbnailWorker(job_queue, concurrency=1, poll_timeout=0.01)
    calls = itertools.count()

    def flaky_dequeue(self, timeout=None):
        if next(calls) == 0:
            raise StoreError('queue down')
        worker.stop()

    monkeypatch.setattr(JobQueue, 'dequeue', flaky_dequeue)

    assert worker.run() == 0
    assert next(calls) == 2


def test_consumer_crash_stops_worker(job_queue, monkeypatch):
    """Test that an unexpected error ends every consumer and is raised."""
    calls = itertools.count()

    def crashing_dequeue(self, timeout=None):
        if next(calls) == 0:
            raise RuntimeError('boom')

    monkeypatch.setattr(JobQueue, 'dequeue', crashing_dequeue)
    worker = ThumbnailWorker(job_queue, concurrency=2, poll_timeout=0.01)

    with pytest.raises(RuntimeError, match='boom'):
        worker.run()


def test_invalid_concurrency(job_queue):
    """Test that a worker needs at least one thread."""
    with pytest.raises(ValueError, match='at least 1'):
        ThumbnailWorker(job_queue, concurrency=0)


@pytest.mark.django_db(transaction=True)
def test_run_burst_generates_thumbnails(job_queue, user, image_file, content_dir):
    """Test consumer threads producing thumbnails."""
    job_queue.enqueue({'userId': str(user.id), 'fileId': str(image_file.id)})

    handled = ThumbnailWorker(job_queue, concurrency=2).run(burst=True)

    assert handled == 1
    assert len(list(content_dir.iterdir())) == 4
