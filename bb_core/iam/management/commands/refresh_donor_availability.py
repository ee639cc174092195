# bb_core/iam/management/commands/refresh_donor_availability.py
from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from bb_core.iam.services.availability import refresh_donor_availability


class Command(BaseCommand):
    help = "Recompute donor availability from last_donate_date (run daily, e.g. from cron at midnight)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--today",
            type=str,
            default=None,
            help="Evaluate as of this date (YYYY-MM-DD). Defaults to the local date.",
        )

    def handle(self, *args, **options):
        today = None
        if options["today"]:
            today = parse_date(options["today"])
            if today is None:
                raise CommandError("--today must be YYYY-MM-DD")

        result = refresh_donor_availability(today=today)

        self.stdout.write(
            self.style.SUCCESS(
                f"Checked {result.checked} donor(s): "
                f"{result.became_available} became available, "
                f"{result.became_unavailable} became unavailable"
            )
        )
