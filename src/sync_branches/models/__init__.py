"""
Data Models

브랜치 동기화 시스템의 핵심 데이터 모델들
"""

from .pull_request import RepositoryRef, PullRequest, PullRequestPayload, ComparisonPayload
from .run import RunConfig, RunOutcome, RunStatus, StepResult, MERGE_METHODS

__all__ = [
    "RepositoryRef",
    "PullRequest",
    "PullRequestPayload",
    "ComparisonPayload",
    "RunConfig",
    "RunOutcome",
    "RunStatus",
    "StepResult",
    "MERGE_METHODS",
]
