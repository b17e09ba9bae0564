from django.core.management.base import BaseCommand

from apps.inquiries.reservations import expire_reservations


class Command(BaseCommand):
    help = "Reclaim properties whose deposit reservation has expired"

    def handle(self, *args, **options):
        expired_count = expire_reservations()
        self.stdout.write(self.style.SUCCESS(f"Expired {expired_count} reservations"))
