import logging

from qc import store
from qc.errors import DirectoryError, DuplicateUser, ProtectedAccount, UnknownUser
from qc.models import STAGE_CHOICES, STAGE_FQC, Operator

logger = logging.getLogger(__name__)

VALID_STAGES = {value for value, _ in STAGE_CHOICES}


def _clean_stage(stage):
    stage = stage or STAGE_FQC
    if stage not in VALID_STAGES:
        raise DirectoryError(f"Unknown stage: {stage}")
    return stage


def _existing(user_id):
    user = store.get_user(user_id)
    if user is None:
        raise UnknownUser(user_id)
    return user


def create_user(user_id, password, stage=STAGE_FQC):
    user_id = (user_id or "").strip()
    if not user_id or not password:
        raise DirectoryError()
    if store.get_user(user_id) is not None:
        raise DuplicateUser(user_id)

    user = Operator(user_id=user_id, is_admin=False, is_active=True, assigned_stage=_clean_stage(stage))
    user.set_password(password)
    store.put_user(user)
    logger.info("Operator %s registered for %s", user_id, user.assigned_stage)
    return user


def update_user(user_id, password, stage):
    """Password and stage only; the user id never changes."""
    if not password:
        raise DirectoryError()
    user = _existing(user_id)
    user.set_password(password)
    user.assigned_stage = _clean_stage(stage)
    store.put_user(user)
    logger.info("Operator %s updated (stage %s)", user_id, user.assigned_stage)
    return user


def toggle_active(user_id):
    user = _existing(user_id)
    if user.is_admin:
        raise ProtectedAccount()
    user.is_active = not user.is_active
    store.put_user(user)
    logger.info("Operator %s %s", user_id, "enabled" if user.is_active else "disabled")
    return user


def delete_user(user_id):
    user = _existing(user_id)
    if user.is_admin:
        raise ProtectedAccount()
    store.delete_user(user_id)
    logger.info("Operator %s deleted", user_id)


def search_users(query, stage):
    """
    Exact, case-insensitive user id match AND exact stage match. Both keys are
    required: the right id under the wrong stage is reported as not found.
    Returns None for a blank query (no search performed), else a list of at
    most one operator.
    """
    query = (query or "").strip().lower()
    if not query:
        return None
    for user in store.list_users():
        if user.user_id.lower() == query and user.assigned_stage == stage:
            return [user]
    return []


def list_users():
    return store.list_users()
