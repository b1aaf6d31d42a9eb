# qc/services/export.py
"""
CSV export of stored reports.

Columns: Report ID, Timestamp, Stage, User ID, Device ID, Checkpoints Summary.
Every value is double-quoted with internal quotes doubled; the summary joins
"label: status" (plus " (Reason: ...)" for failures) with " | ".
"""
from django.utils import timezone

from qc.errors import NoReportsToExport

HEADERS = ["Report ID", "Timestamp", "Stage", "User ID", "Device ID", "Checkpoints Summary"]
SUMMARY_SEPARATOR = " | "


def export_filename(day=None):
    day = day or timezone.localdate()
    return f"Flex_QC_Export_{day.isoformat()}.csv"


def escape(value):
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def checkpoint_summary(checkpoints):
    parts = []
    for cp in checkpoints:
        status = cp.get("status") or "N/A"
        line = f"{cp.get('label', '')}: {status}"
        if status == "Fail":
            line += f" (Reason: {cp.get('reason') or 'Not provided'})"
        parts.append(line)
    return SUMMARY_SEPARATOR.join(parts)


def report_row(report):
    return ",".join(
        escape(v)
        for v in (
            report.id,
            report.timestamp.isoformat(),
            report.stage,
            report.user_id,
            report.device_id,
            checkpoint_summary(report.checkpoints),
        )
    )


def render_reports_csv(reports):
    if not reports:
        raise NoReportsToExport()
    return "\n".join([",".join(HEADERS)] + [report_row(r) for r in reports])
