"""
GitHub API Client

Handles GitHub API authentication, rate limiting, and communication.
Provides the branch, pull request, compare, review request, label and
merge calls used by the sync orchestrator.
"""

import time
import logging
from typing import Dict, List, Optional, Sequence
from datetime import datetime
from urllib.parse import quote
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """GitHub API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class RateLimitExceeded(GitHubAPIError):
    """GitHub API rate limit exceeded"""
    def __init__(self, reset_time: datetime):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}", status_code=429)
        self.reset_time = reset_time


class GitHubClient:
    """
    GitHub API client with authentication, rate limiting, and error handling.

    Provides methods for:
    - Branch and open pull request listing
    - Commit comparison between two branches
    - Pull request creation, review requests, labels and merging
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30,
        max_retries: int = 3,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub token (usually the workflow's GITHUB_TOKEN)
            base_url: GitHub API base URL (default: https://api.github.com)
            timeout: Per-request timeout in seconds
            max_retries: Transport retries for GET requests on 429/5xx
        """
        if not token:
            raise ValueError("GitHub token is required")

        self.token = token
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = self._create_session()
        self.rate_limit_remaining = 5000
        self.rate_limit_reset = datetime.now()

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy and authentication."""
        session = requests.Session()

        # Only reads are retried; writes are attempted exactly once
        retry_strategy = Retry(
            total=self.max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'sync-branches/1.0'
        })

        return session

    def _check_rate_limit(self) -> None:
        """Check and handle GitHub API rate limits."""
        if self.rate_limit_remaining <= 10 and datetime.now() < self.rate_limit_reset:
            wait_time = (self.rate_limit_reset - datetime.now()).total_seconds()
            if wait_time > 0:
                logger.warning(f"Rate limit low ({self.rate_limit_remaining}), resets in {wait_time:.1f}s")
                raise RateLimitExceeded(self.rate_limit_reset)

    def _update_rate_limit(self, response: requests.Response) -> None:
        """Update rate limit information from response headers."""
        if 'X-RateLimit-Remaining' in response.headers:
            self.rate_limit_remaining = int(response.headers['X-RateLimit-Remaining'])

        if 'X-RateLimit-Reset' in response.headers:
            reset_timestamp = int(response.headers['X-RateLimit-Reset'])
            self.rate_limit_reset = datetime.fromtimestamp(reset_timestamp)

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Make authenticated request to GitHub API with rate limiting.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            GitHubAPIError: For API errors
            RateLimitExceeded: When rate limit is exceeded
        """
        self._check_rate_limit()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault('timeout', self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise GitHubAPIError(f"Request failed: {str(e)}")

        self._update_rate_limit(response)

        if response.status_code == 429:
            reset_time = datetime.fromtimestamp(int(response.headers.get('X-RateLimit-Reset', time.time() + 3600)))
            raise RateLimitExceeded(reset_time)

        if not response.ok:
            try:
                error_data = response.json() if response.content else {}
            except ValueError:
                error_data = {}
            raise GitHubAPIError(
                f"GitHub API error: {response.status_code} - {error_data.get('message', 'Unknown error')}",
                status_code=response.status_code,
                response_data=error_data
            )

        return response

    def _json(self, response: requests.Response):
        """Decode a JSON response body."""
        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(
                f"GitHub API error: {response.status_code} - Invalid JSON response: {e}",
                status_code=response.status_code
            ) from e

    def _paginate(self, endpoint: str, params: Optional[Dict] = None, per_page: int = 100) -> List[Dict]:
        """Collect every page of a list endpoint."""
        items = []
        page = 1

        while True:
            page_params = dict(params or {})
            page_params.update({'page': page, 'per_page': per_page})
            response = self._make_request('GET', endpoint, params=page_params)

            page_items = self._json(response)
            if not page_items:
                break

            items.extend(page_items)

            if len(page_items) < per_page:
                break

            page += 1

        return items

    def list_branches(self, owner: str, repo: str) -> List[Dict]:
        """
        Get all branches of a repository.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            List of branch data (each with at least 'name')
        """
        logger.info(f"Fetching branches for {owner}/{repo}")

        branches = self._paginate(f'/repos/{owner}/{repo}/branches')
        logger.debug(f"Found {len(branches)} branches")
        return branches

    def list_pull_requests(self, owner: str, repo: str, state: str = "open") -> List[Dict]:
        """
        Get pull requests of a repository.

        Args:
            owner: Repository owner
            repo: Repository name
            state: Pull request state filter ("open", "closed" or "all")

        Returns:
            List of pull request data
        """
        logger.info(f"Fetching {state} pull requests for {owner}/{repo}")

        pulls = self._paginate(f'/repos/{owner}/{repo}/pulls', params={'state': state})
        logger.debug(f"Found {len(pulls)} {state} pull requests")
        return pulls

    def compare_commits(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
        page: int = 1,
        per_page: int = 1,
    ) -> Dict:
        """
        Compare two commits, branches or tags.

        Args:
            owner: Repository owner
            repo: Repository name
            base: Base ref of the comparison
            head: Head ref of the comparison
            page: Page of changed files to return
            per_page: Number of changed files per page

        Returns:
            Comparison data; 'files' holds the requested page of changed files
        """
        logger.info(f"Comparing {owner}/{repo} {base}...{head}")

        basehead = f"{quote(base, safe='/')}...{quote(head, safe='/')}"
        response = self._make_request(
            'GET',
            f'/repos/{owner}/{repo}/compare/{basehead}',
            params={'page': page, 'per_page': per_page}
        )
        return self._json(response)

    def create_pull_request(
        self,
        owner: str,
        repo: str,
        head: str,
        base: str,
        title: str,
        body: str,
        draft: bool = False,
    ) -> Dict:
        """
        Create a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            head: Branch holding the changes
            base: Branch the changes should be pulled into
            title: Pull request title
            body: Pull request description
            draft: Open the pull request as a draft

        Returns:
            Created pull request data
        """
        logger.info(f"Creating pull request {owner}/{repo} {head} -> {base}")

        response = self._make_request(
            'POST',
            f'/repos/{owner}/{repo}/pulls',
            json={
                'head': head,
                'base': base,
                'title': title,
                'body': body,
                'draft': draft,
            }
        )
        return self._json(response)

    def request_reviewers(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        reviewers: Sequence[str] = (),
        team_reviewers: Sequence[str] = (),
    ) -> Dict:
        """
        Request reviews from users and teams.

        Args:
            owner: Repository owner
            repo: Repository name
            pull_number: Pull request number
            reviewers: User logins
            team_reviewers: Team slugs

        Returns:
            Updated pull request data
        """
        logger.info(f"Requesting reviewers on {owner}/{repo}#{pull_number}")

        response = self._make_request(
            'POST',
            f'/repos/{owner}/{repo}/pulls/{pull_number}/requested_reviewers',
            json={
                'reviewers': list(reviewers),
                'team_reviewers': list(team_reviewers),
            }
        )
        return self._json(response)

    def add_labels(self, owner: str, repo: str, issue_number: int, labels: Sequence[str]) -> List[Dict]:
        """
        Add labels to an issue or pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            issue_number: Issue or pull request number
            labels: Label names

        Returns:
            Labels now set on the issue
        """
        logger.info(f"Adding labels to {owner}/{repo}#{issue_number}: {', '.join(labels)}")

        response = self._make_request(
            'POST',
            f'/repos/{owner}/{repo}/issues/{issue_number}/labels',
            json={'labels': list(labels)}
        )
        return self._json(response)

    def merge_pull_request(self, owner: str, repo: str, pull_number: int, merge_method: str) -> Dict:
        """
        Merge a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            pull_number: Pull request number
            merge_method: "merge", "squash" or "rebase"

        Returns:
            Merge result data ('merged', 'sha', 'message')
        """
        logger.info(f"Merging {owner}/{repo}#{pull_number} using {merge_method}")

        response = self._make_request(
            'PUT',
            f'/repos/{owner}/{repo}/pulls/{pull_number}/merge',
            json={'merge_method': merge_method}
        )
        return self._json(response)

