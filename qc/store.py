# qc/store.py
"""
Record store: key-addressed get/put over the three collections
(operators, reports, device statuses). No transactions; every put is
last-writer-wins.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from django.conf import settings

from .models import STAGE_FQC, DeviceStatus, Operator, QCReport

logger = logging.getLogger(__name__)

SEED_ADMIN_ID = "admin"


# -----------------------
# Operators
# -----------------------
def ensure_seed_admin() -> None:
    """First read of an empty user table seeds the admin account."""
    if Operator.objects.exists():
        return
    admin = Operator(
        user_id=SEED_ADMIN_ID,
        is_admin=True,
        is_active=True,
        assigned_stage=STAGE_FQC,
    )
    admin.set_password(settings.QC_SEED_ADMIN_PASSWORD)
    admin.save(force_insert=True)
    logger.info("Seeded admin account %r", SEED_ADMIN_ID)


def list_users() -> List[Operator]:
    ensure_seed_admin()
    return list(Operator.objects.all())


def get_user(user_id: str) -> Optional[Operator]:
    ensure_seed_admin()
    return Operator.objects.filter(user_id=user_id).first()


def put_user(user: Operator) -> Operator:
    user.save()
    return user


def delete_user(user_id: str) -> None:
    Operator.objects.filter(user_id=user_id).delete()


# -----------------------
# Reports
# -----------------------
def append_report(report: QCReport) -> QCReport:
    report.save()
    logger.info("Report %s stored (%s, device %s, by %s)", report.id, report.stage, report.device_id, report.user_id)
    return report


def report_exists(report_id: str) -> bool:
    return QCReport.objects.filter(id=report_id).exists()


def list_reports() -> List[QCReport]:
    return list(QCReport.objects.all())


# -----------------------
# Device statuses
# -----------------------
def get_device_status(device_id: str) -> Optional[DeviceStatus]:
    return DeviceStatus.objects.filter(device_id=device_id).first()


def put_device_status(status: DeviceStatus) -> DeviceStatus:
    status.save()
    return status


def list_device_statuses() -> List[DeviceStatus]:
    return list(DeviceStatus.objects.all().order_by("-last_updated"))
