from django.core.management.base import BaseCommand
from sales.services import purge_expired_idempotency_keys


class Command(BaseCommand):
    help = "Delete expired sale idempotency key records based on expires_at"

    def handle(self, *args, **options):
        count = purge_expired_idempotency_keys()
        self.stdout.write(self.style.SUCCESS(f"Deleted {count} expired idempotency keys."))
