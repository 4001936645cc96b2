# accounts/management/commands/seed_permissions.py

from django.core.management.base import BaseCommand

from accounts.permissions import seed_permissions


class Command(BaseCommand):
    help = "Seed default permissions to the database"

    def handle(self, *args, **options):
        total = seed_permissions()
        self.stdout.write(self.style.SUCCESS(f"Done! {total} permission codes present."))
