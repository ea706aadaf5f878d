"""Django management command to run the thumbnail worker."""

import logging
from typing import Any, final, override

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from server.apps.core.exceptions import StoreError
from server.apps.thumbnails.infrastructure.job_queue import get_job_queue
from server.apps.thumbnails.logic.worker import ThumbnailWorker

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Consume the thumbnail queue and write image thumbnails."""

    help = 'Run the thumbnail worker'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--concurrency',
            type=int,
            default=None,
            help='Jobs processed in parallel (default: from settings)',
        )
        parser.add_argument(
            '--poll-timeout',
            type=float,
            default=5.0,
            help='Seconds to wait for a job per poll (default: 5)',
        )
        parser.add_argument(
            '--burst',
            action='store_true',
            default=False,
            help='Exit once the queue is empty',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments.
            options: Keyword arguments from command line.
        """
        job_queue = get_job_queue()
        if job_queue is None:
            raise CommandError('THUMBNAIL_QUEUE_URL is not configured')

        try:
            job_queue.connect()
        except StoreError as exc:
            raise CommandError(str(exc)) from exc

        concurrency = (
            options['concurrency'] or settings.THUMBNAIL_WORKER_CONCURRENCY
        )
        worker = ThumbnailWorker(
            job_queue,
            concurrency=concurrency,
            poll_timeout=options['poll_timeout'],
        )

        self.stdout.write(
            self.style.SUCCESS(
                f'Starting thumbnail worker on {job_queue.name} '
                f'(concurrency: {concurrency})',
            ),
        )
        try:
            handled = worker.run(burst=options['burst'])
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down...'))
            return

        self.stdout.write(
            self.style.SUCCESS(f'Thumbnail worker stopped, {handled} jobs handled'),
        )
