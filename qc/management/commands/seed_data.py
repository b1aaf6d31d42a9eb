# qc/management/commands/seed_data.py
from django.core.management.base import BaseCommand

from qc import store
from qc.errors import DuplicateUser
from qc.models import STAGE_FQC, STAGE_PACKAGING
from qc.services.directory import create_user

DEFAULT_OPERATORS = [
    ("op1", "1111", STAGE_FQC),
    ("pack1", "2222", STAGE_PACKAGING),
]


class Command(BaseCommand):
    help = "Seed the admin account and (optionally) sample operators"

    def add_arguments(self, parser):
        parser.add_argument("--operators", action="store_true", help="Also create sample FQC/Packaging operators")

    def handle(self, *args, **options):
        store.ensure_seed_admin()
        self.stdout.write(self.style.SUCCESS(f"Admin account '{store.SEED_ADMIN_ID}' present."))

        if not options["operators"]:
            return

        for user_id, password, stage in DEFAULT_OPERATORS:
            try:
                create_user(user_id, password, stage)
            except DuplicateUser:
                self.stdout.write(self.style.WARNING(f"Operator {user_id} already exists, skipped."))
                continue
            self.stdout.write(self.style.SUCCESS(f"Created operator {user_id} ({stage})."))
