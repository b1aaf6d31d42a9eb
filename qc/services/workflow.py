# qc/services/workflow.py
"""
Inspection session state machine.

Steps:
  STAGE_SELECTION -> LOGIN -> DEVICE_ID_ENTRY -> [SCAN_DEVICE_ID] -> CHECKLIST -> SUCCESS
  STAGE_SELECTION -> LOGIN -> ADMIN -> [DASHBOARD]           (administrators)

Every transition takes a SessionContext and returns a new one. Guards raise
QCError subclasses; run_transition() turns those into ctx.error so the caller
stays on the current screen.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from django.utils import timezone

from qc import store
from qc.errors import (
    IncompleteChecklist,
    InvalidTransition,
    MissingDeviceId,
    QCError,
    StagePrerequisiteNotMet,
)
from qc.models import STAGE_CHOICES, QCReport
from qc.services import process
from qc.services.auth import authenticate, authorize_for_stage
from qc.services.stage_gate import can_enter_stage, record_outcome

logger = logging.getLogger(__name__)

STAGE_SELECTION = "STAGE_SELECTION"
LOGIN = "LOGIN"
DEVICE_ID_ENTRY = "DEVICE_ID_ENTRY"
SCAN_DEVICE_ID = "SCAN_DEVICE_ID"
CHECKLIST = "CHECKLIST"
SUCCESS = "SUCCESS"
ADMIN = "ADMIN"
DASHBOARD = "DASHBOARD"

STEPS = (STAGE_SELECTION, LOGIN, DEVICE_ID_ENTRY, SCAN_DEVICE_ID, CHECKLIST, SUCCESS, ADMIN, DASHBOARD)

VALID_STAGES = {value for value, _ in STAGE_CHOICES}


@dataclass(frozen=True)
class SessionContext:
    step: str = STAGE_SELECTION
    stage: Optional[str] = None
    user_id: Optional[str] = None
    is_admin: bool = False
    device_id: str = ""
    device_image: Optional[str] = None
    checkpoints: Tuple[process.Checkpoint, ...] = field(default_factory=tuple)
    last_report_id: Optional[str] = None
    error: str = ""

    @property
    def authenticated(self):
        return self.user_id is not None

    def as_dict(self):
        return {
            "step": self.step,
            "stage": self.stage,
            "user_id": self.user_id,
            "is_admin": self.is_admin,
            "device_id": self.device_id,
            "device_image": self.device_image,
            "checkpoints": [cp.as_dict() for cp in self.checkpoints],
            "last_report_id": self.last_report_id,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data):
        if not data:
            return cls()
        step = data.get("step") or STAGE_SELECTION
        return cls(
            step=step if step in STEPS else STAGE_SELECTION,
            stage=data.get("stage"),
            user_id=data.get("user_id"),
            is_admin=bool(data.get("is_admin")),
            device_id=data.get("device_id") or "",
            device_image=data.get("device_image"),
            checkpoints=tuple(process.Checkpoint.from_dict(cp) for cp in data.get("checkpoints") or []),
            last_report_id=data.get("last_report_id"),
            error=data.get("error") or "",
        )


def _require(ctx, *steps):
    if ctx.step not in steps:
        raise InvalidTransition(f"Cannot do that from {ctx.step}.")


def _move(ctx, step, **changes):
    return replace(ctx, step=step, error="", **changes)


def _clear_device(ctx, step, **changes):
    """Drop all per-device session data (id, photo, checklist)."""
    return _move(ctx, step, device_id="", device_image=None, checkpoints=(), **changes)


def run_transition(ctx, transition, *args, **kwargs):
    """Apply a transition; a QCError leaves the step unchanged and sets ctx.error."""
    try:
        return transition(ctx, *args, **kwargs)
    except QCError as exc:
        logger.info("%s refused at %s: %s", transition.__name__, ctx.step, exc.message)
        return replace(ctx, error=exc.message)


# -----------------------
# Stage selection + login
# -----------------------
def select_stage(ctx, stage):
    _require(ctx, STAGE_SELECTION)
    if stage not in VALID_STAGES:
        raise InvalidTransition(f"Unknown stage: {stage}")

    if ctx.authenticated and not ctx.is_admin:
        user = store.get_user(ctx.user_id)
        if user is not None and user.is_active:
            authorize_for_stage(user, stage)
            return _clear_device(ctx, DEVICE_ID_ENTRY, stage=stage)

    return _move(ctx, LOGIN, stage=stage)


def open_admin(ctx):
    _require(ctx, STAGE_SELECTION)
    if ctx.authenticated and ctx.is_admin:
        return _move(ctx, ADMIN, stage=None)
    return _move(ctx, LOGIN, stage=None)


def login(ctx, user_id, password):
    _require(ctx, LOGIN)
    user = authenticate(user_id, password)

    if user.is_admin:
        logger.info("Admin %s signed in", user.user_id)
        return _clear_device(ctx, ADMIN, user_id=user.user_id, is_admin=True)

    authorize_for_stage(user, ctx.stage)
    logger.info("Operator %s signed in for %s", user.user_id, ctx.stage)
    return _clear_device(ctx, DEVICE_ID_ENTRY, user_id=user.user_id, is_admin=False)


def logout(ctx):
    return SessionContext()


def back_to_selection(ctx):
    """Return home keeping the identity; any in-progress device work is dropped."""
    _require(ctx, LOGIN, DEVICE_ID_ENTRY, CHECKLIST, ADMIN)
    return _clear_device(ctx, STAGE_SELECTION, stage=None)


# -----------------------
# Device identification
# -----------------------
def set_device_image(ctx, image):
    _require(ctx, DEVICE_ID_ENTRY)
    return replace(ctx, device_image=image, error="")


def _open_checklist(ctx, raw_device_id):
    device_id = raw_device_id.strip().upper() if isinstance(raw_device_id, str) else ""
    if not device_id:
        raise MissingDeviceId()
    if not can_enter_stage(device_id, ctx.stage):
        raise StagePrerequisiteNotMet(device_id)
    return _move(ctx, CHECKLIST, device_id=device_id, checkpoints=process.build_checklist(ctx.stage))


def enter_device_id(ctx, device_id):
    _require(ctx, DEVICE_ID_ENTRY)
    return _open_checklist(ctx, device_id)


def start_scan(ctx):
    _require(ctx, DEVICE_ID_ENTRY)
    return _move(ctx, SCAN_DEVICE_ID)


def cancel_scan(ctx):
    _require(ctx, SCAN_DEVICE_ID)
    return _move(ctx, DEVICE_ID_ENTRY)


def scan_decoded(ctx, code):
    """
    A decoded code ends the scan. If the code is usable the session goes
    straight to the checklist; otherwise it drops back to manual entry with
    the code pre-filled and the guard's message.
    """
    _require(ctx, SCAN_DEVICE_ID)
    try:
        return _open_checklist(ctx, code)
    except (MissingDeviceId, StagePrerequisiteNotMet) as exc:
        return replace(
            ctx,
            step=DEVICE_ID_ENTRY,
            device_id=code.strip().upper() if isinstance(code, str) else "",
            error=exc.message,
        )


def finish_scan(ctx, code=None, error=None):
    """Close a scan run: a decoded code goes through scan_decoded, no code or a camera error returns to manual entry."""
    _require(ctx, SCAN_DEVICE_ID)
    if error is not None:
        return replace(cancel_scan(ctx), error=error.message)
    if code is None:
        return cancel_scan(ctx)
    return scan_decoded(ctx, code)


# -----------------------
# Checklist
# -----------------------
def update_checkpoint(ctx, checkpoint_id, **changes):
    _require(ctx, CHECKLIST)
    return replace(ctx, checkpoints=process.apply_patch(ctx.checkpoints, checkpoint_id, **changes), error="")


def add_checkpoint(ctx, label=process.DEFAULT_CUSTOM_LABEL):
    _require(ctx, CHECKLIST)
    return replace(ctx, checkpoints=process.add_checkpoint(ctx.checkpoints, label), error="")


def remove_checkpoint(ctx, checkpoint_id):
    _require(ctx, CHECKLIST)
    return replace(ctx, checkpoints=process.remove_checkpoint(ctx.checkpoints, checkpoint_id), error="")


def leave_checklist(ctx):
    _require(ctx, CHECKLIST)
    return _move(ctx, DEVICE_ID_ENTRY, checkpoints=())


def next_report_id(now=None):
    millis = int((now or timezone.now()).timestamp() * 1000)
    report_id = f"REP-{millis}"
    while store.report_exists(report_id):
        millis += 1
        report_id = f"REP-{millis}"
    return report_id


def submit(ctx):
    _require(ctx, CHECKLIST)
    if not process.can_submit(ctx.checkpoints):
        raise IncompleteChecklist()

    now = timezone.now()
    report = QCReport(
        id=next_report_id(now),
        timestamp=now,
        stage=ctx.stage,
        user_id=ctx.user_id or "Unknown",
        device_id=ctx.device_id,
        checkpoints=[cp.as_dict() for cp in ctx.checkpoints],
    )
    store.append_report(report)
    record_outcome(ctx.device_id, ctx.stage, process.any_failed(ctx.checkpoints))

    return _move(ctx, SUCCESS, last_report_id=report.id)


def next_device(ctx):
    _require(ctx, SUCCESS)
    return _clear_device(ctx, DEVICE_ID_ENTRY, last_report_id=None)


# -----------------------
# Admin
# -----------------------
def open_dashboard(ctx):
    _require(ctx, ADMIN)
    return _move(ctx, DASHBOARD)


def close_dashboard(ctx):
    _require(ctx, DASHBOARD)
    return _move(ctx, ADMIN)
