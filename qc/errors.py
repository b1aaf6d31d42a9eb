# qc/errors.py
"""
Workflow error taxonomy. Every error is recoverable: it becomes a message on
the current screen and the session stays where it was.
"""


class QCError(Exception):
    message = "Something went wrong."

    def __init__(self, message=None):
        self.message = message or self.message
        super().__init__(self.message)


# -----------------------
# Authorization
# -----------------------
class InvalidCredentials(QCError):
    message = "Invalid User ID or Password."


class AccountDisabled(QCError):
    message = "Account is disabled. Please contact Admin."


class StageMismatch(QCError):
    def __init__(self, assigned_stage=None, message=None):
        self.assigned_stage = assigned_stage
        if message is None:
            message = f"Access denied. You are assigned to {assigned_stage or 'no stage'}."
        super().__init__(message)


# -----------------------
# Workflow
# -----------------------
class StagePrerequisiteNotMet(QCError):
    def __init__(self, device_id=None, message=None):
        self.device_id = device_id
        if message is None:
            message = f"Device {device_id} has no completed FQC on record. Packaging is blocked."
        super().__init__(message)


class IncompleteChecklist(QCError):
    message = "Please complete all checkpoints, images, and reasons."


class MissingDeviceId(QCError):
    message = "Device ID is required"


class InvalidTransition(QCError):
    message = "That action is not available on this screen."


# -----------------------
# Collaborators
# -----------------------
class CameraAccessDenied(QCError):
    message = "Camera access denied. Enter the device ID manually."


class SuggestionServiceUnavailable(QCError):
    message = "Failure-reason suggestion service unavailable."


# -----------------------
# Admin directory / export
# -----------------------
class DirectoryError(QCError):
    message = "User ID and password are required."


class DuplicateUser(DirectoryError):
    def __init__(self, user_id=None):
        super().__init__(f"Operator {user_id} already exists.")


class UnknownUser(DirectoryError):
    def __init__(self, user_id=None):
        super().__init__(f"Operator {user_id} not found.")


class ProtectedAccount(DirectoryError):
    message = "Admin accounts cannot be disabled or deleted."


class NoReportsToExport(QCError):
    message = "No reports available to export."
