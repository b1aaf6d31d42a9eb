import logging
from datetime import timedelta

from django.utils import timezone

from qc import store
from qc.models import (
    STAGE_FQC,
    STAGE_PACKAGING,
    STATUS_COMPLETED,
    STATUS_FAILED,
    DeviceStatus,
)

logger = logging.getLogger(__name__)

STAGE_FIELDS = {
    STAGE_FQC: "fqc_status",
    STAGE_PACKAGING: "packaging_status",
}


def can_enter_stage(device_id, stage):
    """Packaging needs a DeviceStatus row with fqc_status=completed. FQC is always open."""
    if stage == STAGE_FQC:
        return True
    if stage == STAGE_PACKAGING:
        status = store.get_device_status(device_id)
        return status is not None and status.fqc_status == STATUS_COMPLETED
    return False


def _next_timestamp(previous):
    now = timezone.now()
    if previous is not None and now <= previous:
        # clock resolution can repeat a value; keep last_updated strictly increasing
        now = previous + timedelta(microseconds=1)
    return now


def record_outcome(device_id, stage, any_checkpoint_failed):
    """
    Set the stage's field to failed/completed after a report is stored.
    Creates the row on first use; the other stage's field is left alone.
    """
    field = STAGE_FIELDS.get(stage)
    if field is None:
        raise ValueError(f"Unknown stage: {stage!r}")

    status = store.get_device_status(device_id)
    if status is None:
        status = DeviceStatus(device_id=device_id)
        previous = None
    else:
        previous = status.last_updated

    outcome = STATUS_FAILED if any_checkpoint_failed else STATUS_COMPLETED
    setattr(status, field, outcome)
    status.last_updated = _next_timestamp(previous)
    store.put_device_status(status)

    logger.info("Device %s %s -> %s", device_id, field, outcome)
    return status
