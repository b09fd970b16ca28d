import signal

from django.core.management.base import BaseCommand
from scheduler.jobs import Scheduler, default_jobs


class Command(BaseCommand):
    help = "Run the periodic jobs (expired orders, abandoned carts, low stock) in a single process."

    def add_arguments(self, parser):
        parser.add_argument("--once", action="store_true", help="Run the jobs that are due now, then exit")
        parser.add_argument("--tick", type=int, default=None, help="Override SCHEDULER_TICK_SECONDS")

    def handle(self, *args, **options):
        scheduler = Scheduler(default_jobs(), tick_seconds=options["tick"])
        if options["once"]:
            ran = scheduler.run_pending()
            self.stdout.write(self.style.SUCCESS(f"Ran: {', '.join(ran) or 'nothing due'}"))
            return

        signal.signal(signal.SIGTERM, scheduler.stop)
        signal.signal(signal.SIGINT, scheduler.stop)
        self.stdout.write(f"Scheduler running every {scheduler.tick_seconds}s; stop with Ctrl+C")
        scheduler.run_forever()
        self.stdout.write(self.style.SUCCESS("Scheduler stopped"))
