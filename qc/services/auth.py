import logging

from qc import store
from qc.errors import AccountDisabled, InvalidCredentials, StageMismatch

logger = logging.getLogger(__name__)


def authenticate(user_id, password):
    """
    Resolve an operator by exact (case-sensitive) user id + password.
    Raises InvalidCredentials / AccountDisabled. No session side effects.
    """
    if not isinstance(user_id, str) or not isinstance(password, str):
        raise InvalidCredentials()
    user = store.get_user(user_id)
    # exact, case-sensitive id comparison
    if user is None or user.user_id != user_id or not user.check_password(password):
        logger.info("Login failed for %r", user_id)
        raise InvalidCredentials()
    if not user.is_active:
        logger.info("Login refused for disabled account %r", user_id)
        raise AccountDisabled()
    return user


def authorize_for_stage(user, stage):
    """
    Non-admins may only work their assigned stage. Admins bypass the check
    (the caller routes them to the admin console instead).
    """
    if user.is_admin:
        return user
    if not stage:
        raise StageMismatch(message="Please select a stage from the home screen first.")
    if user.assigned_stage != stage:
        raise StageMismatch(user.assigned_stage)
    return user
