from typing import Iterable

from qc.services import process

PHOTO = "data:image/png;base64,iVBORw0KGgo="


def completed(checkpoints, fail_ids: Iterable[str] = (), reason: str = "Visible crack near the corner."):
    """Fill every checkpoint: photo + Pass, or Fail with a reason for fail_ids."""
    out = tuple(checkpoints)
    for cp in checkpoints:
        if cp.id in fail_ids:
            out = process.apply_patch(out, cp.id, status="Fail", image=PHOTO, reason=reason)
        else:
            out = process.apply_patch(out, cp.id, status="Pass", image=PHOTO)
    return out
