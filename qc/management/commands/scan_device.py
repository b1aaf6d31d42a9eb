import sys

from django.core.management.base import BaseCommand, CommandError

from qc.models import STAGE_CHOICES
from qc.services import workflow
from qc.services.scanner import BackgroundScan, ScanLoop


class Command(BaseCommand):
    help = "Identify a device with a barcode scanner (keyboard wedge on stdin) and open its checklist"
    stealth_options = ("stdin",)

    def add_arguments(self, parser):
        parser.add_argument("--stage", required=True, choices=[value for value, _ in STAGE_CHOICES])
        parser.add_argument("--user", required=True, help="Operator user id")
        parser.add_argument("--password", required=True)
        parser.add_argument("--timeout", type=float, default=30.0, help="Seconds to wait for a scan")

    def handle(self, *args, **options):
        ctx = workflow.SessionContext()
        steps = (
            (workflow.select_stage, (options["stage"],)),
            (workflow.login, (options["user"], options["password"])),
            (workflow.start_scan, ()),
        )
        for transition, transition_args in steps:
            ctx = workflow.run_transition(ctx, transition, *transition_args)
            if ctx.error:
                raise CommandError(ctx.error)

        stdin = options.get("stdin") or sys.stdin
        found = []

        def read_line():
            line = stdin.readline()
            if not line:
                scan.token.cancel()
                return None
            return line

        scan = BackgroundScan(ScanLoop(read_line, lambda line: line, interval=0), found.append)
        self.stdout.write(f"Scan a device for {options['stage']} ...")
        scan.start()
        if not scan.join(options["timeout"]):
            self.stderr.write(self.style.WARNING("No scan before timeout."))
        scan.stop()

        ctx = workflow.run_transition(ctx, workflow.finish_scan, found[0] if found else None, scan.error)
        if ctx.step != workflow.CHECKLIST:
            raise CommandError(ctx.error or "No device code scanned. Enter the device ID manually.")

        self.stdout.write(self.style.SUCCESS(f"Device {ctx.device_id} ready for {ctx.stage} inspection:"))
        for cp in ctx.checkpoints:
            self.stdout.write(f"  [{cp.id}] {cp.label}")
