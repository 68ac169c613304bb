"""
Sync Orchestrator

Decides whether a sync pull request must exist, makes sure it does and
applies the optional reviewer, label and auto-merge steps.
"""

import logging
from typing import List, Optional

from .github.client import GitHubClient, GitHubAPIError
from .models.pull_request import RepositoryRef, PullRequest, ComparisonPayload
from .models.run import RunConfig, RunOutcome, RunStatus, StepResult
from .errors import (
    ConfigurationError,
    CreationError,
    ReviewerAssignmentWarning,
    LabelAssignmentFailure,
    MergeAttemptFailure,
)


logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """
    Branch sync orchestrator.

    Runs the sync as a fixed sequence:
    1. Validate the target branch exists
    2. Reuse an open pull request for the same head/base pair
    3. Optionally skip when the branches have no changed files
    4. Create the pull request
    5. Request reviewers, add labels and auto-merge (best-effort)
    """

    def __init__(self, client: GitHubClient, repository: RepositoryRef):
        """
        Initialize orchestrator.

        Args:
            client: GitHub API client
            repository: Repository the branches belong to
        """
        self.client = client
        self.repository = repository

    def run(self, config: RunConfig) -> RunOutcome:
        """
        Run one sync.

        Args:
            config: Run configuration

        Returns:
            RunOutcome; its status is created, existing or no_action

        Raises:
            ConfigurationError: Target branch does not exist
            CreationError: Pull request creation failed
            GitHubAPIError: Listing or comparison calls failed
        """
        logger.info(
            f"Should a pull request to {config.to_branch} from {config.from_branch} be created?"
        )

        self._validate_target(config.to_branch)

        current = self._find_open_pull_request(config.from_branch, config.to_branch)
        if current is not None:
            logger.info(
                f"There is already a pull request ({current.number}) to {config.to_branch} "
                f"from {config.from_branch}. You can view it here: {current.html_url}"
            )
            return RunOutcome(status=RunStatus.EXISTING, pull_request=current)

        if config.content_comparison and not self.has_content_difference(config.from_branch, config.to_branch):
            logger.info(
                f"There is no content difference between {config.from_branch} and {config.to_branch}."
            )
            return RunOutcome(status=RunStatus.NO_ACTION)

        pull_request = self._create_pull_request(config)
        steps = self._post_create(pull_request, config)

        logger.info(
            f"Pull request ({pull_request.number}) successfully created"
            f"{' and merged' if pull_request.merged else ''}! "
            f"You can view it here: {pull_request.html_url}"
        )

        return RunOutcome(status=RunStatus.CREATED, pull_request=pull_request, steps=steps)

    def _validate_target(self, to_branch: str) -> None:
        branches = self.client.list_branches(self.repository.owner, self.repository.name)
        branch_names = [branch['name'] for branch in branches]
        logger.info(f"✅ Available branches: {', '.join(branch_names)}")

        if to_branch not in branch_names:
            raise ConfigurationError(
                f'❌ Error: Branch "{to_branch}" does not exist in {self.repository}'
            )

        logger.info(f'✅ Branch "{to_branch}" exists. Proceeding with the action...')

    def _find_open_pull_request(self, from_branch: str, to_branch: str) -> Optional[PullRequest]:
        pulls = self.client.list_pull_requests(self.repository.owner, self.repository.name, state="open")

        for pull in pulls:
            candidate = PullRequest.from_api(pull)
            if candidate.matches(from_branch, to_branch):
                return candidate

        return None

    def has_content_difference(self, from_branch: str, to_branch: str) -> bool:
        """
        Check whether head has at least one changed file against base.

        Args:
            from_branch: Head branch
            to_branch: Base branch

        Returns:
            True if the comparison reports any changed file
        """
        data = self.client.compare_commits(
            self.repository.owner,
            self.repository.name,
            base=to_branch,
            head=from_branch,
            page=1,
            per_page=1,
        )
        comparison = ComparisonPayload.model_validate(data)
        logger.debug(
            f"Comparison {to_branch}...{from_branch}: status={comparison.status}, "
            f"ahead_by={comparison.ahead_by}, files={len(comparison.files)}"
        )
        return comparison.has_changed_files

    def _create_pull_request(self, config: RunConfig) -> PullRequest:
        try:
            data = self.client.create_pull_request(
                self.repository.owner,
                self.repository.name,
                head=config.from_branch,
                base=config.to_branch,
                title=config.pull_request_title,
                body=config.pull_request_body,
                draft=config.is_draft,
            )
        except GitHubAPIError as e:
            raise CreationError(
                f"Failed to create pull request from {config.from_branch} to {config.to_branch}: {e}",
                status_code=e.status_code,
            ) from e

        return PullRequest.from_api(data)

    def _post_create(self, pull_request: PullRequest, config: RunConfig) -> List[StepResult]:
        steps = []

        if config.wants_reviewers:
            steps.append(self._request_reviewers(pull_request, config))

        if config.labels:
            steps.append(self._add_labels(pull_request, config))

        if config.auto_merge_method:
            steps.append(self._merge(pull_request, config.auto_merge_method))

        return steps

    def _request_reviewers(self, pull_request: PullRequest, config: RunConfig) -> StepResult:
        try:
            self.client.request_reviewers(
                self.repository.owner,
                self.repository.name,
                pull_request.number,
                reviewers=config.reviewers,
                team_reviewers=config.team_reviewers,
            )
        except GitHubAPIError as e:
            logger.warning(
                f"Reviews may only be requested from collaborators of the {self.repository.name} repository. "
                f"Update the reviewers to include only collaborators. ({e})"
            )
            return StepResult.failure('request_reviewers', ReviewerAssignmentWarning(str(e)))

        return StepResult.success('request_reviewers')

    def _add_labels(self, pull_request: PullRequest, config: RunConfig) -> StepResult:
        try:
            self.client.add_labels(
                self.repository.owner,
                self.repository.name,
                pull_request.number,
                config.labels,
            )
        except GitHubAPIError as e:
            logger.warning(f"Failed to add labels {', '.join(config.labels)} to #{pull_request.number}: {e}")
            return StepResult.failure('add_labels', LabelAssignmentFailure(str(e)))

        return StepResult.success('add_labels')

    def _merge(self, pull_request: PullRequest, merge_method: str) -> StepResult:
        try:
            self.client.merge_pull_request(
                self.repository.owner,
                self.repository.name,
                pull_request.number,
                merge_method,
            )
        except GitHubAPIError as e:
            pull_request.merged = False
            logger.warning(f"Auto-merge ({merge_method}) of #{pull_request.number} failed: {e}")
            return StepResult.failure('merge', MergeAttemptFailure(str(e)))

        pull_request.merged = True
        return StepResult.success('merge')
