"""
Sync Errors

Errors raised by the branch sync run. Fatal errors propagate out of the
orchestrator; best-effort failures are carried inside StepResult values.
"""

from typing import Optional


class SyncError(Exception):
    """Base error for branch sync runs"""


class ConfigurationError(SyncError):
    """Invalid inputs or a repository that cannot satisfy them"""


class CreationError(SyncError):
    """Pull request creation failed"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ReviewerAssignmentWarning(SyncError):
    """Requested reviewers could not be assigned"""


class LabelAssignmentFailure(SyncError):
    """Labels could not be added"""


class MergeAttemptFailure(SyncError):
    """Auto-merge was requested but the merge call failed"""
