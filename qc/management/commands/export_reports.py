from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from qc.errors import NoReportsToExport
from qc.services.export import export_filename, render_reports_csv
from qc.store import list_reports


class Command(BaseCommand):
    help = "Write all QC reports to Flex_QC_Export_<date>.csv"

    def add_arguments(self, parser):
        parser.add_argument("--output-dir", default=".", help="Directory for the CSV file")

    def handle(self, *args, **options):
        try:
            content = render_reports_csv(list_reports())
        except NoReportsToExport as exc:
            raise CommandError(exc.message)

        out_dir = Path(options["output_dir"])
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / export_filename()
        path.write_text(content, encoding="utf-8")
        self.stdout.write(self.style.SUCCESS(f"Exported reports to {path}"))
