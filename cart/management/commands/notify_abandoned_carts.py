from cart.services import notify_abandoned_carts
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Remind registered users about carts left untouched inside the abandonment window."

    def add_arguments(self, parser):
        parser.add_argument("--min-hours", type=int, default=None, help="Override CART_ABANDON_MIN_HOURS")
        parser.add_argument("--max-hours", type=int, default=None, help="Override CART_ABANDON_MAX_HOURS")

    def handle(self, *args, **options):
        sent = notify_abandoned_carts(min_hours=options["min_hours"], max_hours=options["max_hours"])
        self.stdout.write(self.style.SUCCESS(f"Abandoned cart reminders sent: {sent}"))
