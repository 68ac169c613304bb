"""
GitHub Integration Layer

This module provides GitHub API integration for branch listing,
pull request management and branch comparison.
"""

from .client import GitHubClient, GitHubAPIError, RateLimitExceeded

__all__ = ['GitHubClient', 'GitHubAPIError', 'RateLimitExceeded']
