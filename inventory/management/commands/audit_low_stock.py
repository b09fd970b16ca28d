from django.core.management.base import BaseCommand
from inventory.services import audit_low_stock


class Command(BaseCommand):
    help = "Notify administrators about variants at or below the low-stock threshold."

    def add_arguments(self, parser):
        parser.add_argument("--threshold", type=int, default=None, help="Override INVENTORY_LOW_STOCK_THRESHOLD")

    def handle(self, *args, **options):
        counts = audit_low_stock(threshold=options["threshold"])
        self.stdout.write(self.style.SUCCESS(f"Low stock: {counts['low']}, out of stock: {counts['out']}"))
