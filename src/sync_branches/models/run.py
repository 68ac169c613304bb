"""
Run Data Models

한 번의 동기화 실행에 대한 설정과 결과 모델들
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .pull_request import PullRequest
from ..errors import SyncError


MERGE_METHODS = frozenset({'merge', 'squash', 'rebase'})


class RunStatus(str, Enum):
    """실행 종료 상태"""
    CREATED = "created"
    EXISTING = "existing"
    NO_ACTION = "no_action"


@dataclass(frozen=True)
class RunConfig:
    """실행 단위 불변 설정"""
    from_branch: str
    to_branch: str
    github_token: str = field(repr=False)
    title: Optional[str] = None
    body: Optional[str] = None
    auto_merge_method: Optional[str] = None
    is_draft: bool = False
    content_comparison: bool = False
    reviewers: Tuple[str, ...] = ()
    team_reviewers: Tuple[str, ...] = ()
    labels: Tuple[str, ...] = ()

    def __post_init__(self):
        """데이터 검증"""
        if not self.from_branch:
            raise ValueError("Source branch is required")
        if not self.to_branch:
            raise ValueError("Target branch is required")
        if not self.github_token:
            raise ValueError("GitHub token is required")
        if self.auto_merge_method and self.auto_merge_method not in MERGE_METHODS:
            raise ValueError(
                f"Invalid auto-merge method: {self.auto_merge_method} "
                f"(expected one of {', '.join(sorted(MERGE_METHODS))})"
            )

    @property
    def pull_request_title(self) -> str:
        return self.title or f"sync: {self.from_branch} to {self.to_branch}"

    @property
    def pull_request_body(self) -> str:
        return self.body or (
            f"sync-branches: New code has just landed in {self.from_branch}, "
            f"so let's bring {self.to_branch} up to speed!"
        )

    @property
    def wants_reviewers(self) -> bool:
        return bool(self.reviewers or self.team_reviewers)


@dataclass(frozen=True)
class StepResult:
    """Outcome of a best-effort step after creation."""
    step: str
    ok: bool
    reason: Optional[str] = None
    error: Optional[SyncError] = None

    @classmethod
    def success(cls, step: str) -> "StepResult":
        return cls(step=step, ok=True)

    @classmethod
    def failure(cls, step: str, error: SyncError) -> "StepResult":
        return cls(step=step, ok=False, reason=str(error), error=error)


@dataclass
class RunOutcome:
    """실행 결과 (출력값 포함)"""
    status: RunStatus
    pull_request: Optional[PullRequest] = None
    steps: List[StepResult] = field(default_factory=list)

    def __post_init__(self):
        """데이터 검증"""
        if self.status is RunStatus.NO_ACTION and self.pull_request is not None:
            raise ValueError("A no-action outcome cannot carry a pull request")
        if self.status is not RunStatus.NO_ACTION and self.pull_request is None:
            raise ValueError(f"A {self.status.value} outcome requires a pull request")

    @property
    def merged(self) -> bool:
        return bool(self.pull_request and self.pull_request.merged)

    @property
    def failed_steps(self) -> List[StepResult]:
        return [s for s in self.steps if not s.ok]

    @property
    def outputs(self) -> Dict[str, str]:
        """PULL_REQUEST_URL / PULL_REQUEST_NUMBER, 없으면 빈 dict"""
        if self.pull_request is None:
            return {}
        return {
            'PULL_REQUEST_URL': str(self.pull_request.html_url),
            'PULL_REQUEST_NUMBER': str(self.pull_request.number),
        }
