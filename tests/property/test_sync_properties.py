"""
Property-based tests for the sync orchestrator and action inputs.

Properties:
- A missing target branch never leads to pull request calls
- An open matching pull request is always reused
- Content comparison gates creation on changed files only when enabled
- Best-effort step failures never change the reported outputs
"""

import pytest
from hypothesis import given, strategies as st, assume
from unittest.mock import Mock

from sync_branches.config import ActionInputs
from sync_branches.github.client import GitHubClient, GitHubAPIError
from sync_branches.orchestrator import SyncOrchestrator
from sync_branches.models.pull_request import RepositoryRef
from sync_branches.models.run import RunConfig, RunStatus
from sync_branches.errors import ConfigurationError


branch_names = st.text(
    min_size=1,
    max_size=30,
    alphabet=st.characters(whitelist_categories=('Lu', 'Ll', 'Nd'), whitelist_characters='-_./'),
)

REPOSITORY = RepositoryRef('octo', 'repo')


def pull_payload(number, head, base):
    return {
        'number': number,
        'html_url': f'https://github.com/octo/repo/pull/{number}',
        'head': {'ref': head},
        'base': {'ref': base},
    }


def make_client(branches, pulls=(), files=()):
    client = Mock(spec=GitHubClient)
    client.list_branches.return_value = [{'name': name} for name in branches]
    client.list_pull_requests.return_value = list(pulls)
    client.compare_commits.return_value = {'files': list(files)}
    client.create_pull_request.return_value = pull_payload(99, 'head', 'base')
    return client


class TestSyncProperties:
    """Property tests for SyncOrchestrator."""

    @given(
        branches=st.lists(branch_names, max_size=20),
        from_branch=branch_names,
        to_branch=branch_names,
    )
    def test_missing_target_never_mutates(self, branches, from_branch, to_branch):
        """
        Property: A target absent from the branch list fails the run.

        Given: Any branch list without the target
        When: The orchestrator runs
        Then: ConfigurationError is raised and no pull request call is made
        """
        assume(to_branch not in branches)
        client = make_client(branches)
        config = RunConfig(from_branch=from_branch, to_branch=to_branch, github_token='t', labels=('sync',))

        with pytest.raises(ConfigurationError):
            SyncOrchestrator(client, REPOSITORY).run(config)

        client.list_pull_requests.assert_not_called()
        client.create_pull_request.assert_not_called()
        client.add_labels.assert_not_called()
        client.merge_pull_request.assert_not_called()

    @given(
        from_branch=branch_names,
        to_branch=branch_names,
        others=st.lists(st.tuples(branch_names, branch_names), max_size=10),
        position=st.integers(min_value=0, max_value=10),
        number=st.integers(min_value=1, max_value=99999),
        content_comparison=st.booleans(),
    )
    def test_existing_pull_request_is_reused(
        self, from_branch, to_branch, others, position, number, content_comparison
    ):
        """
        Property: An open head/base match is reported and nothing is created.

        Given: Open pull requests that include a match at any position
        When: The orchestrator runs
        Then: The first match is reported and no create call happens
        """
        unrelated = [
            pull_payload(i + 100000, head, base)
            for i, (head, base) in enumerate(others)
            if (head, base) != (from_branch, to_branch)
        ]
        position = min(position, len(unrelated))
        pulls = unrelated[:position] + [pull_payload(number, from_branch, to_branch)] + unrelated[position:]
        client = make_client([to_branch], pulls=pulls)
        config = RunConfig(
            from_branch=from_branch,
            to_branch=to_branch,
            github_token='t',
            content_comparison=content_comparison,
            auto_merge_method='merge',
        )

        outcome = SyncOrchestrator(client, REPOSITORY).run(config)

        assert outcome.status is RunStatus.EXISTING
        assert outcome.outputs['PULL_REQUEST_NUMBER'] == str(number)
        client.create_pull_request.assert_not_called()
        client.compare_commits.assert_not_called()
        client.merge_pull_request.assert_not_called()

    @given(
        files=st.lists(st.fixed_dictionaries({'filename': st.text(min_size=1, max_size=20)}), max_size=3),
        content_comparison=st.booleans(),
    )
    def test_content_gate(self, files, content_comparison):
        """
        Property: Creation happens unless comparison is on and finds no files.
        """
        client = make_client(['main'], files=files)
        config = RunConfig(
            from_branch='feature-x',
            to_branch='main',
            github_token='t',
            content_comparison=content_comparison,
        )

        outcome = SyncOrchestrator(client, REPOSITORY).run(config)

        should_create = not content_comparison or len(files) > 0
        assert (outcome.status is RunStatus.CREATED) == should_create
        assert client.create_pull_request.called == should_create
        if not should_create:
            assert outcome.outputs == {}

    @given(
        reviewers_fail=st.booleans(),
        labels_fail=st.booleans(),
        merge_fail=st.booleans(),
    )
    def test_best_effort_failures_keep_outputs(self, reviewers_fail, labels_fail, merge_fail):
        """
        Property: Post-creation failures never change the reported PR.
        """
        client = make_client(['main'])
        error = GitHubAPIError("GitHub API error: 422 - Unprocessable Entity", status_code=422)
        if reviewers_fail:
            client.request_reviewers.side_effect = error
        if labels_fail:
            client.add_labels.side_effect = error
        if merge_fail:
            client.merge_pull_request.side_effect = error
        config = RunConfig(
            from_branch='feature-x',
            to_branch='main',
            github_token='t',
            reviewers=('alice',),
            labels=('sync',),
            auto_merge_method='squash',
        )

        outcome = SyncOrchestrator(client, REPOSITORY).run(config)

        assert outcome.outputs == {
            'PULL_REQUEST_URL': 'https://github.com/octo/repo/pull/99',
            'PULL_REQUEST_NUMBER': '99',
        }
        assert outcome.merged is not merge_fail
        assert len(outcome.failed_steps) == sum([reviewers_fail, labels_fail, merge_fail])


class TestActionInputProperties:
    """Property tests for action input parsing."""

    @given(raw=st.text(max_size=10))
    def test_flag_is_true_only_for_true(self, raw):
        inputs = ActionInputs.load({
            'from_branch': 'a',
            'to_branch': 'b',
            'github_token': 't',
            'content_comparison': raw,
        })

        assert inputs.content_comparison is (raw.strip().lower() == 'true')
