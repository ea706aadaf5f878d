"""Management command to requeue jobs abandoned by crashed workers."""

from typing import Any, final, override

from django.core.management.base import BaseCommand, CommandError

from server.apps.thumbnails.infrastructure.job_queue import get_job_queue


@final
class Command(BaseCommand):
    """Move jobs stuck in processing back to the pending queue."""

    help = 'Requeue thumbnail jobs left in processing (run with workers stopped)'

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        job_queue = get_job_queue()
        if job_queue is None:
            raise CommandError('THUMBNAIL_QUEUE_URL is not configured')

        requeued = job_queue.requeue_stalled()
        self.stdout.write(
            self.style.SUCCESS(f'Requeued {requeued} stalled jobs'),
        )
