from django.core.management.base import BaseCommand
from orders.services import cancel_expired_orders


class Command(BaseCommand):
    help = "Cancel prepaid orders whose payment did not arrive within the timeout and restore their stock."

    def add_arguments(self, parser):
        parser.add_argument(
            "--timeout-minutes", type=int, default=None, help="Override ORDER_PAYMENT_TIMEOUT_MINUTES"
        )

    def handle(self, *args, **options):
        codes = cancel_expired_orders(timeout_minutes=options["timeout_minutes"])
        for code in codes:
            self.stdout.write(f"Cancelled {code}")
        self.stdout.write(self.style.SUCCESS(f"Cancelled {len(codes)} expired order(s)"))
