"""Delete expired session rows."""

from django.core.management.base import BaseCommand

from authentication.services import SessionService


class Command(BaseCommand):
    help = "Delete sessions whose expiry has passed. Expired sessions are already ignored on lookup."

    def handle(self, *args, **options):
        deleted = SessionService.purge_expired()
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} expired session(s)."))
