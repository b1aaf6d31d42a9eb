# qc/services/process.py
"""
Checkpoint templates for the two inspection stages, plus the checklist
operations used while a device session is open:
- build_checklist: fresh, unset copy of the stage template
- add_checkpoint / remove_checkpoint: operator edits before submission
- apply_patch: replace named fields of one checkpoint, returning a new list
- can_submit: the submit-time completeness rule
"""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, fields, replace
from typing import Iterable, Optional, Tuple

from qc.models import STAGE_FQC, STAGE_PACKAGING

PASS = "Pass"
FAIL = "Fail"
CHECKPOINT_STATUSES = (PASS, FAIL)

CUSTOM_PREFIX = "custom_"
DEFAULT_CUSTOM_LABEL = "New Checkpoint"

FQC_CHECKPOINTS = [
    {"id": "scr_01", "label": "Screen Surface Scratch Test"},
    {"id": "bat_02", "label": "Battery Contact Alignment"},
    {"id": "btn_03", "label": "Tactile Button Feedback"},
    {"id": "chg_04", "label": "Charging Port Inspection"},
]

PACKAGING_CHECKPOINTS = [
    {"id": "lbl_01", "label": "Serial Label Matching"},
    {"id": "box_02", "label": "Box Integrity & Corner Strength"},
    {"id": "acc_03", "label": "Accessories (Cable/Manual) Inclusion"},
    {"id": "sel_04", "label": "Anti-Tamper Seal Application"},
]

STAGE_TEMPLATES = {
    STAGE_FQC: FQC_CHECKPOINTS,
    STAGE_PACKAGING: PACKAGING_CHECKPOINTS,
}


def _text(value):
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class Checkpoint:
    id: str
    label: str
    status: Optional[str] = None
    image: Optional[str] = None
    reason: str = ""

    def as_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            label=_text(data.get("label")),
            status=data.get("status") if data.get("status") in CHECKPOINT_STATUSES else None,
            image=data.get("image") if isinstance(data.get("image"), str) else None,
            reason=_text(data.get("reason")),
        )


PATCHABLE_FIELDS = {f.name for f in fields(Checkpoint)} - {"id"}
TEXT_FIELDS = ("label", "reason")

Checklist = Tuple[Checkpoint, ...]


def build_checklist(stage) -> Checklist:
    template = STAGE_TEMPLATES.get(stage)
    if template is None:
        raise ValueError(f"Unknown stage: {stage!r}")
    return tuple(Checkpoint(id=t["id"], label=t["label"]) for t in template)


def new_custom_id() -> str:
    return f"{CUSTOM_PREFIX}{uuid.uuid4().hex[:12]}"


def add_checkpoint(checkpoints: Iterable[Checkpoint], label: str = DEFAULT_CUSTOM_LABEL) -> Checklist:
    return tuple(checkpoints) + (Checkpoint(id=new_custom_id(), label=_text(label) or DEFAULT_CUSTOM_LABEL),)


def remove_checkpoint(checkpoints: Iterable[Checkpoint], checkpoint_id: str) -> Checklist:
    return tuple(cp for cp in checkpoints if cp.id != checkpoint_id)


def apply_patch(checkpoints: Iterable[Checkpoint], checkpoint_id: str, **changes) -> Checklist:
    """
    Replace only the named fields on the checkpoint with this id.
    Unknown ids leave the list unchanged; unknown field names raise.
    """
    unknown = set(changes) - PATCHABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot patch checkpoint fields: {', '.join(sorted(unknown))}")
    status = changes.get("status")
    if status is not None and status not in CHECKPOINT_STATUSES:
        raise ValueError(f"Checkpoint status must be Pass or Fail (got {status!r})")
    if "reason" in changes and changes["reason"] is None:
        changes["reason"] = ""
    for name in TEXT_FIELDS:
        if name in changes and not isinstance(changes[name], str):
            raise ValueError(f"Checkpoint {name} must be text")
    image = changes.get("image")
    if image is not None and not isinstance(image, str):
        raise ValueError("Checkpoint image must be a data URL string")

    return tuple(replace(cp, **changes) if cp.id == checkpoint_id else cp for cp in checkpoints)


def is_complete(cp: Checkpoint) -> bool:
    if cp.status is None or cp.image is None:
        return False
    if cp.status == PASS:
        return True
    return cp.status == FAIL and cp.reason.strip() != ""


def can_submit(checkpoints: Iterable[Checkpoint]) -> bool:
    """Evaluated once over the whole current list (ad-hoc items included)."""
    return all(is_complete(cp) for cp in checkpoints)


def any_failed(checkpoints: Iterable[Checkpoint]) -> bool:
    return any(cp.status == FAIL for cp in checkpoints)
