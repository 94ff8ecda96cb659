import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from rest_framework.exceptions import ValidationError

from RecitationReportApp.domain.services import account_service

User = get_user_model()

class Command(BaseCommand):
    help = "Create the initial admin account unless an admin already exists."

    def add_arguments(self, parser):
        parser.add_argument("--name", default=os.getenv("ADMIN_NAME", "Admin"))
        parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL", "admin@almufid.com"))
        parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD"))

    def handle(self, *args, **options):
        if User.objects.admins().exists():
            self.stdout.write("Admin account already exists; nothing to do.")
            return
        if not options["password"]:
            raise CommandError("Provide --password or set ADMIN_PASSWORD.")
        try:
            admin = account_service.create_admin(options["name"], options["email"], options["password"])
        except ValidationError as exc:
            raise CommandError(str(exc.detail)) from exc
        self.stdout.write(self.style.SUCCESS(f"Created admin {admin.email}"))
