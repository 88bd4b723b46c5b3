"""CLI entry point for ai-pr-reviewer.

action.yml runs this command inside the workflow. Inputs arrive as INPUT_*
environment variables; the options below override them for local runs.
"""

from __future__ import annotations

import importlib.metadata
import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler

from prreviewer_core.client import PROVIDERS
from prreviewer_core.config import DEFAULT_CONFIG_PATH

console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=(level or "INFO").upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


def set_failed(message: str) -> None:
    """Report a fatal error the way the Actions runner expects."""
    # Workflow commands are read from stdout; newlines must be escaped.
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    click.echo(f"::error::{escaped}")


@click.command()
@click.version_option(
    version=importlib.metadata.version("ai-pr-reviewer"),
    prog_name="ai-pr-reviewer",
)
@click.option(
    "--repo",
    envvar="GITHUB_REPOSITORY",
    default=None,
    help="GitHub repository in owner/name format. Defaults to $GITHUB_REPOSITORY.",
)
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Defaults to the PR in the triggering event payload.",
)
@click.option(
    "--config",
    "config_path",
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the configuration file.",
    envvar="AI_PR_REVIEWER_CONFIG",
)
@click.option(
    "--provider",
    type=click.Choice(sorted(PROVIDERS)),
    default=None,
    help="AI provider. Overrides the ai-provider input.",
)
@click.option("--severity", default=None, help="Pipe-delimited severities to post, e.g. 'high|medium'.")
@click.option("--trigger-label", "trigger_label", default=None, help="Label that requests a review.")
@click.pass_context
def main(
    ctx: click.Context,
    repo: str | None,
    pr_number: int | None,
    config_path: str,
    provider: str | None,
    severity: str | None,
    trigger_label: str | None,
):
    """AI-powered pull request reviewer for GitHub Actions.

    Reviews every added or modified file of a labelled pull request with
    Claude or GPT, posts the findings as inline comments, then removes the
    label and approves.
    """
    from prreviewer_core.config import load_config
    from prreviewer_core.errors import ConfigError
    from prreviewer_core.gh.context import pull_number_from_event
    from prreviewer_core.reviewer import run_review

    try:
        config = load_config(
            config_path,
            cli_overrides={"ai_provider": provider, "severity": severity, "trigger_label": trigger_label},
        )
        _configure_logging(config.get("log_level"))

        if not repo:
            raise ConfigError("No repository given. Set GITHUB_REPOSITORY or pass --repo.")
        if pr_number is None:
            pr_number = pull_number_from_event(os.environ.get("GITHUB_EVENT_PATH"))

        console.print("Starting AI-powered pull request review")
        summary = run_review(repo=repo, pr_number=pr_number, config=config)
    except Exception as e:
        logger.debug("Review run aborted", exc_info=True)
        set_failed(str(e))
        ctx.exit(1)

    if summary.skipped_reason:
        console.print("Pull request does not meet processing criteria. Exiting.")
        return
    if summary.failed_files:
        console.print(f"[yellow]{len(summary.failed_files)} file(s) could not be reviewed.[/yellow]")
    if not summary.finalized:
        console.print("[yellow]Finalizing the pull request did not fully succeed.[/yellow]")
    console.print("AI review process completed successfully")
