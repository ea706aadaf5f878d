"""Tests for the Redis job queue."""

import pytest

from server.apps.core.exceptions import StoreError
from server.apps.thumbnails.exceptions import QueueNotConfiguredError
from server.apps.thumbnails.infrastructure.job_queue import (
    JobQueue,
    JobStatus,
    get_job_queue,
    require_job_queue,
)


@pytest.fixture
def job_queue(redis_client):
    """Queue on the fake Redis server.

    Returns:
        JobQueue instance.
    """
    return JobQueue(redis_client, name='testQueue')


def test_dequeue_empty(job_queue):
    """Test that an empty queue gives nothing."""
    assert job_queue.dequeue() is None


def test_fifo_order(job_queue):
    """Test that jobs come out in the order they went in."""
    first_id = job_queue.enqueue({'fileId': '1'})
    second_id = job_queue.enqueue({'fileId': '2'})

    assert job_queue.dequeue().id == first_id
    assert job_queue.dequeue().id == second_id


def test_dequeue_with_timeout(job_queue):
    """Test the blocking variant when a job is waiting."""
    job_id = job_queue.enqueue({'fileId': '1'})

    job = job_queue.dequeue(timeout=0.1)

    assert job.id == job_id
    assert job.data == {'fileId': '1'}


def test_status_lifecycle(job_queue):
    """Test the statuses a completed job goes through."""
    job_id = job_queue.enqueue({'fileId': '1'})
    assert job_queue.get_status(job_id) == JobStatus.ENQUEUED

    job = job_queue.dequeue()
    assert job_queue.get_status(job_id) == JobStatus.PROCESSING
    assert job_queue.pending_count() == 0
    assert job_queue.processing_count() == 1

    job_queue.complete(job)
    assert job_queue.get_status(job_id) == JobStatus.COMPLETED
    assert job_queue.processing_count() == 0


def test_unknown_status(job_queue):
    """Test the status of a job that never existed."""
    assert job_queue.get_status('missing') is None


def test_fail_records_error(job_queue):
    """Test that failures are kept with their error."""
    job_queue.enqueue({'fileId': '1', 'userId': '2'})
    job = job_queue.dequeue()

    job_queue.fail(job, 'File not found')

    assert job_queue.get_status(job.id) == JobStatus.FAILED
    assert job_queue.processing_count() == 0
    failed = job_queue.failed_jobs()
    assert len(failed) == 1
    assert failed[0]['id'] == job.id
    assert failed[0]['data'] == {'fileId': '1', 'userId': '2'}
    assert failed[0]['error'] == 'File not found'


def test_requeue_stalled(job_queue):
    """Test that abandoned jobs are delivered again in order."""
    first_id = job_queue.enqueue({'fileId': '1'})
    second_id = job_queue.enqueue({'fileId': '2'})
    job_queue.dequeue()
    job_queue.dequeue()

    assert job_queue.requeue_stalled() == 2

    assert job_queue.processing_count() == 0
    assert job_queue.get_status(first_id) == JobStatus.ENQUEUED
    assert job_queue.dequeue().id == first_id
    assert job_queue.dequeue().id == second_id


def test_requeue_nothing_stalled(job_queue):
    """Test requeueing with an empty processing list."""
    assert job_queue.requeue_stalled() == 0


@pytest.mark.parametrize('raw', [
    'not json',
    '[1, 2]',
    '{"data": {"fileId": "1"}}',
])
def test_dequeue_drops_malformed_entry(job_queue, redis_client, raw):
    """Test that entries that aren't jobs move to the failed list."""
    redis_client.lpush(job_queue.name, raw)
    job_id = job_queue.enqueue({'fileId': '2'})

    job = job_queue.dequeue()

    assert job.id == job_id
    assert job_queue.processing_count() == 1
    failed = job_queue.failed_jobs()
    assert len(failed) == 1
    assert failed[0]['raw'] == raw
    assert failed[0]['error'] == 'Malformed job entry'


def test_dequeue_only_malformed_entries(job_queue, redis_client):
    """Test a queue holding nothing but malformed entries."""
    redis_client.lpush(job_queue.name, 'not json', '{}')

    assert job_queue.dequeue() is None
    assert job_queue.pending_count() == 0
    assert job_queue.processing_count() == 0
    assert len(job_queue.failed_jobs()) == 2


def test_requeue_stalled_with_malformed_entry(job_queue, redis_client):
    """Test that requeueing survives entries that aren't jobs."""
    job_id = job_queue.enqueue({'fileId': '1'})
    job_queue.dequeue()
    redis_client.lpush(f'{job_queue.name}:processing', 'not json')

    assert job_queue.requeue_stalled() == 2

    assert job_queue.get_status(job_id) == JobStatus.ENQUEUED
    assert job_queue.dequeue().id == job_id
    assert job_queue.dequeue() is None
    assert job_queue.failed_jobs()[0]['raw'] == 'not json'


def test_unreachable_redis(job_queue, redis_server):
    """Test that Redis failures surface as StoreError."""
    redis_server.connected = False

    with pytest.raises(StoreError):
        job_queue.connect()
    with pytest.raises(StoreError):
        job_queue.enqueue({'fileId': '1'})


def test_get_job_queue_from_settings(settings):
    """Test that the process-wide queue uses the configured name."""
    settings.THUMBNAIL_QUEUE_NAME = 'otherQueue'
    get_job_queue.cache_clear()

    assert get_job_queue().name == 'otherQueue'


def test_queue_disabled(settings):
    """Test that an empty URL disables the queue."""
    settings.THUMBNAIL_QUEUE_URL = ''
    get_job_queue.cache_clear()

    assert get_job_queue() is None
    with pytest.raises(QueueNotConfiguredError):
        require_job_queue()
