"""
Command Line Entry Point

Runs one branch sync from action inputs (or a YAML config file), writes
the step outputs and maps the result to a process exit code.
"""

import argparse
import logging
from typing import List, Optional

from .actions import set_failed, write_outputs
from .config import AppConfig, setup_logging
from .github.client import GitHubClient, GitHubAPIError
from .errors import SyncError
from .models.run import RunOutcome
from .orchestrator import SyncOrchestrator


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sync-branches",
        description="Open a pull request syncing one branch into another.",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML config file (default: read action inputs from the environment)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level",
    )
    return parser


def load_config(config_path: Optional[str] = None, log_level: Optional[str] = None) -> AppConfig:
    """Load and validate configuration."""
    config = AppConfig.from_yaml(config_path) if config_path else AppConfig.from_env()
    if log_level:
        config.logging.level = log_level
    config.validate()
    return config


def run_sync(config: AppConfig) -> RunOutcome:
    """Run the orchestrator for a loaded configuration and publish its outputs."""
    client = GitHubClient(
        config.github.token,
        base_url=config.github.api_base_url,
        timeout=config.github.timeout_seconds,
        max_retries=config.github.max_retries,
    )
    orchestrator = SyncOrchestrator(client, config.repository_ref)

    outcome = orchestrator.run(config.sync)
    write_outputs(outcome.outputs)

    for step in outcome.failed_steps:
        logger.debug(f"Best-effort step {step.step} failed: {step.reason}")

    return outcome


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, args.log_level)
        setup_logging(config.logging, debug=config.debug)
        run_sync(config)
    except (SyncError, GitHubAPIError) as e:
        set_failed(str(e))
        return 1
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        set_failed(str(e) or e.__class__.__name__)
        return 1

    return 0
