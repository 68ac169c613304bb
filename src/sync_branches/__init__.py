"""
Sync Branches

Opens (and optionally merges) a pull request that brings one branch
of a GitHub repository up to date with another.
"""

__version__ = "1.0.0"

from .orchestrator import SyncOrchestrator
from .models.run import RunConfig, RunOutcome, RunStatus

__all__ = ["SyncOrchestrator", "RunConfig", "RunOutcome", "RunStatus"]
