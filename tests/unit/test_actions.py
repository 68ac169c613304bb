"""
Unit tests for GitHub Actions workflow commands and outputs.
"""

import io
import logging

from sync_branches.actions import (
    ActionsAnnotationHandler,
    escape_data,
    set_failed,
    set_output,
    workflow_command,
    write_outputs,
)


class TestWorkflowCommands:
    """Unit tests for workflow command formatting."""

    def test_escape_data(self):
        assert escape_data('100%\nnext\rline') == '100%25%0Anext%0Dline'

    def test_workflow_command(self):
        assert workflow_command('error', 'boom') == '::error::boom'

    def test_workflow_command_properties(self):
        line = workflow_command('warning', 'careful', {'title': 'a:b,c'})
        assert line == '::warning title=a%3Ab%2Cc::careful'

    def test_set_failed(self):
        stream = io.StringIO()
        set_failed('Branch "x" does not exist\nin octo/repo', stream=stream)

        assert stream.getvalue() == '::error::Branch "x" does not exist%0Ain octo/repo\n'


class TestOutputs:
    """Unit tests for step outputs."""

    def test_set_output_appends_to_file(self, tmp_path):
        output_file = tmp_path / 'output'
        output_file.write_text('EXISTING=1\n', encoding='utf-8')
        env = {'GITHUB_OUTPUT': str(output_file)}

        set_output('PULL_REQUEST_NUMBER', '42', environ=env)

        assert output_file.read_text(encoding='utf-8') == 'EXISTING=1\nPULL_REQUEST_NUMBER=42\n'

    def test_set_output_multiline(self, tmp_path):
        output_file = tmp_path / 'output'
        env = {'GITHUB_OUTPUT': str(output_file)}

        set_output('BODY', 'line one\nline two', environ=env)

        lines = output_file.read_text(encoding='utf-8').splitlines()
        assert lines[0].startswith('BODY<<ghadelimiter_')
        delimiter = lines[0].split('<<', 1)[1]
        assert lines[1:] == ['line one', 'line two', delimiter]

    def test_set_output_without_file_logs(self, caplog):
        with caplog.at_level(logging.INFO, logger='sync_branches.actions'):
            set_output('PULL_REQUEST_URL', 'https://github.com/o/r/pull/1', environ={})

        assert 'PULL_REQUEST_URL=https://github.com/o/r/pull/1' in caplog.text

    def test_write_outputs(self, tmp_path):
        output_file = tmp_path / 'output'
        env = {'GITHUB_OUTPUT': str(output_file)}

        write_outputs({'PULL_REQUEST_URL': 'https://github.com/o/r/pull/3', 'PULL_REQUEST_NUMBER': '3'}, environ=env)

        assert output_file.read_text(encoding='utf-8') == (
            'PULL_REQUEST_URL=https://github.com/o/r/pull/3\nPULL_REQUEST_NUMBER=3\n'
        )

    def test_write_no_outputs(self, tmp_path):
        output_file = tmp_path / 'output'
        write_outputs({}, environ={'GITHUB_OUTPUT': str(output_file)})

        assert not output_file.exists()


class TestActionsAnnotationHandler:
    """Unit tests for the annotation logging handler."""

    def setup_method(self):
        self.stream = io.StringIO()
        self.logger = logging.getLogger('sync_branches.test_annotations')
        self.logger.propagate = False
        self.logger.setLevel(logging.DEBUG)
        self.handler = ActionsAnnotationHandler(stream=self.stream)
        self.logger.addHandler(self.handler)

    def teardown_method(self):
        self.logger.removeHandler(self.handler)
        self.logger.propagate = True

    def test_warning_and_error(self):
        self.logger.info('not annotated')
        self.logger.warning('reviewers skipped')
        self.logger.error('merge failed')

        assert self.stream.getvalue().splitlines() == [
            '::warning::reviewers skipped',
            '::error::merge failed',
        ]
