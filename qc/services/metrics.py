from collections import Counter, OrderedDict

from django.conf import settings
from django.utils import timezone

from qc import store
from qc.models import STAGE_CHOICES


def submissions_on(reports, day):
    """Reports whose timestamp falls on the given calendar day (local time)."""
    return sum(1 for r in reports if timezone.localtime(r.timestamp).date() == day)


def counts_by_stage(reports):
    counts = OrderedDict((value, 0) for value, _ in STAGE_CHOICES)
    for r in reports:
        counts[r.stage] = counts.get(r.stage, 0) + 1
    return counts


def checkpoint_totals(reports):
    """Pass/fail checkpoint counts across every report."""
    passed = failed = 0
    for r in reports:
        for cp in r.checkpoints:
            if cp.get("status") == "Pass":
                passed += 1
            elif cp.get("status") == "Fail":
                failed += 1
    return {"passed": passed, "failed": failed}


def top_failures(reports, limit=None):
    """
    Most frequently failed checkpoint labels. Ties keep first-encountered
    order (Counter preserves insertion order and sorted() is stable).
    """
    limit = settings.QC_DASHBOARD_TOP_FAILURES if limit is None else limit
    counts = Counter()
    for r in reports:
        for cp in r.checkpoints:
            if cp.get("status") == "Fail":
                counts[cp.get("label", "")] += 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [{"label": label, "count": count} for label, count in ranked[:limit]]


def counts_by_operator(reports):
    counts = OrderedDict()
    for r in reports:
        counts[r.user_id] = counts.get(r.user_id, 0) + 1
    return counts


def recent_devices(statuses, limit=None):
    limit = settings.QC_DASHBOARD_DEVICE_LIMIT if limit is None else limit
    ordered = sorted(statuses, key=lambda s: s.last_updated, reverse=True)
    return [
        {
            "device_id": s.device_id,
            "fqc_status": s.fqc_status,
            "packaging_status": s.packaging_status,
            "last_updated": s.last_updated.isoformat(),
        }
        for s in ordered[:limit]
    ]


def dashboard_summary(today=None):
    """
    Dashboard (derived on every call, never stored):
    - submissions today
    - submissions per stage
    - pass/fail checkpoint totals
    - top failing checkpoints
    - submissions per operator
    - most recently updated devices
    """
    reports = store.list_reports()
    statuses = store.list_device_statuses()
    today = today or timezone.localdate()
    totals = checkpoint_totals(reports)

    return {
        "today_count": submissions_on(reports, today),
        "total_reports": len(reports),
        "by_stage": counts_by_stage(reports),
        "passed": totals["passed"],
        "failed": totals["failed"],
        "top_failures": top_failures(reports),
        "by_operator": counts_by_operator(reports),
        "device_count": len(statuses),
        "devices": recent_devices(statuses),
    }
