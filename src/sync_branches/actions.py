"""
GitHub Actions Workflow Commands

Writes step outputs to $GITHUB_OUTPUT and emits workflow commands
(::error::, ::warning::) so failures show up as run annotations.
"""

import os
import sys
import uuid
import logging
from typing import Dict, Mapping, Optional, TextIO


logger = logging.getLogger(__name__)


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace('%', '%25').replace('\r', '%0D').replace('\n', '%0A')


def escape_property(value: str) -> str:
    """Escape a workflow command property value."""
    return escape_data(value).replace(':', '%3A').replace(',', '%2C')


def workflow_command(command: str, message: str, properties: Optional[Dict[str, str]] = None) -> str:
    """
    Build a workflow command line.

    Args:
        command: Command name ("error", "warning", "notice", ...)
        message: Command data
        properties: Optional command properties (e.g. title)

    Returns:
        Formatted command, e.g. "::warning title=x::message"
    """
    props = ''
    if properties:
        props = ' ' + ','.join(f"{key}={escape_property(str(val))}" for key, val in properties.items())
    return f"::{command}{props}::{escape_data(message)}"


def set_output(name: str, value: str, environ: Optional[Mapping[str, str]] = None) -> None:
    """
    Set a step output.

    Appends to the file named by GITHUB_OUTPUT. Multi-line values use the
    heredoc form. Without GITHUB_OUTPUT the output is only logged.
    """
    env = os.environ if environ is None else environ
    output_path = env.get('GITHUB_OUTPUT')
    value = str(value)

    if not output_path:
        logger.info(f"Output {name}={value}")
        return

    if '\n' in value:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        entry = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
    else:
        entry = f"{name}={value}\n"

    with open(output_path, 'a', encoding='utf-8') as f:
        f.write(entry)
    logger.debug(f"Wrote output {name}")


def write_outputs(outputs: Mapping[str, str], environ: Optional[Mapping[str, str]] = None) -> None:
    """Set every output of a run."""
    for name, value in outputs.items():
        set_output(name, value, environ=environ)


def set_failed(message: str, stream: Optional[TextIO] = None) -> None:
    """Report the run as failed with an error annotation."""
    stream = stream or sys.stdout
    stream.write(workflow_command('error', message) + '\n')
    stream.flush()


class ActionsAnnotationHandler(logging.Handler):
    """Logging handler turning warnings and errors into workflow annotations."""

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__(level=logging.WARNING)
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        command = 'error' if record.levelno >= logging.ERROR else 'warning'
        try:
            line = workflow_command(command, record.getMessage())
            stream = self.stream or sys.stdout
            stream.write(line + '\n')
            stream.flush()
        except Exception:
            self.handleError(record)
