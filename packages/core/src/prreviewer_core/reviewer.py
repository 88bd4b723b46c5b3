"""Core PR review orchestration."""

from __future__ import annotations

import logging

from github import GithubException
from rich.console import Console
from rich.markup import escape

from prreviewer_core.client import ReviewClient
from prreviewer_core.config import api_key_for, parse_severities, validate_config
from prreviewer_core.errors import ReviewerError, UninitializedClientError, UnsupportedProviderError
from prreviewer_core.gh.diff import get_commentable_lines
from prreviewer_core.gh.pull_request import (
    approve,
    compare_commits,
    create_review_comment,
    get_pull,
    get_repo,
    has_label,
    is_locked,
    remove_label,
)
from prreviewer_core.models import ChangedFileSet, FileChange, ReviewItem, ReviewRequest, ReviewSummary

console = Console()
logger = logging.getLogger(__name__)

# Every comment is anchored to the last commit of the compared range, not to
# the commit that last touched the commented line. GitHub accepts the head
# commit for any line visible in the base...head diff.
ANCHOR_POLICY = "head-of-range"

APPROVAL_BODY = "Code review completed successfully by AI Assistant"

# Client misuse is fatal; any other error fails only the file being reviewed.
_FATAL_ERRORS = (UninitializedClientError, UnsupportedProviderError)


def select_anchor_commit(changed: ChangedFileSet):
    """Return the commit every review comment in this run is attached to."""
    if not changed.commits:
        raise ReviewerError("Compared range contains no commits to anchor review comments to.")
    return changed.commits[-1]


def get_skip_reason(pr, trigger_label: str) -> str | None:
    """Return why this PR must not be reviewed, or None if it is eligible."""
    if not has_label(pr, trigger_label):
        return f"Required label {trigger_label!r} not found"
    if pr.state == "closed" or is_locked(pr):
        return "Pull request is closed or locked"
    return None


def build_comment_body(item: ReviewItem) -> str:
    lines = [
        "| Category | Severity |",
        "| -------- | -------- |",
        f"| {item.category.upper()} | {item.severity} |",
        "",
        item.comment,
    ]
    if item.suggestion:
        lines += ["", "Suggestion:", f"```{item.language}", item.suggestion.rstrip("\n"), "```"]
    return "\n".join(lines) + "\n"


def process_file(
    client: ReviewClient,
    pr,
    file: FileChange,
    anchor_commit,
    severities: frozenset,
    summary: ReviewSummary | None = None,
) -> int:
    """Review one file and post its comments. Returns the number posted.

    Raises whatever the review client or GitHub raises; the caller decides
    whether that is fatal. When a summary is given its comment total is
    bumped as each comment lands, so a failure part-way through a file
    still counts the comments already on the PR.
    """
    patch = file.patch or ""
    console.print("  Requesting AI review")
    request = ReviewRequest(diff_text=patch, file_name=file.filename)
    result = client.get_review(request.to_prompt())

    if not result.has_review:
        console.print("  No review comments to add")
        return 0

    commentable = get_commentable_lines(patch)
    posted = 0
    for item in result.reviews:
        if item.severity not in severities:
            console.print(
                f"  Skipping review comment for {escape(file.filename)} ({item.category}, severity: {item.severity})"
            )
            continue
        if item.line_number not in commentable:
            logger.warning(
                "Skipping comment for %s line %d: line is not part of the diff",
                file.filename,
                item.line_number,
            )
            continue
        console.print(
            f"  Adding review comment for {escape(file.filename)} ({item.category}, severity: {item.severity})"
        )
        create_review_comment(pr, anchor_commit, file.filename, item.line_number, build_comment_body(item))
        posted += 1
        if summary is not None:
            summary.total_comments += 1
    return posted


def finalize_pull_request(pr, trigger_label: str) -> bool:
    """Remove the trigger label and approve. Returns True only if both succeed.

    The two steps are independent: a failed label removal does not stop the
    approval. Neither failure is raised.
    """
    ok = True
    try:
        console.print(f"Removing label: {escape(trigger_label)}")
        remove_label(pr, trigger_label)
    except Exception as e:
        logger.error("Removing label %r failed: %s", trigger_label, e)
        ok = False

    try:
        console.print("Approving pull request")
        approve(pr, APPROVAL_BODY)
    except Exception as e:
        logger.error("Approving pull request failed: %s", e)
        ok = False
    return ok


def run_review(
    repo: str,
    pr_number: int,
    config: dict,
    repo_obj=None,
    client: ReviewClient | None = None,
) -> ReviewSummary:
    """Run the full PR review pipeline and return a ReviewSummary.

    Configuration, PR lookup and diff retrieval errors propagate. Per-file
    review failures and finalization failures are logged and recorded on the
    summary instead.
    """
    validate_config(config)
    severities = parse_severities(config["severity"])
    trigger_label = config["trigger_label"]

    if client is None:
        client = ReviewClient()
        console.print(f"Initializing AI reviewer with provider: {config['ai_provider']}")
        client.initialize(config["ai_provider"], api_key_for(config), config.get("ai_model"))

    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])

    console.print(f"Fetching PR details for {repo}#{pr_number}")
    try:
        this_pr = get_pull(this_repo, pr_number)
    except GithubException as e:
        if e.status == 404:
            raise ValueError(f"PR #{pr_number} not found in {repo}.") from e
        raise

    summary = ReviewSummary(repo=repo, pr_number=pr_number, head_sha=this_pr.head.sha)

    reason = get_skip_reason(this_pr, trigger_label)
    if reason:
        console.print(f"[yellow]{escape(reason)}. Skipping review.[/yellow]")
        summary.skipped_reason = reason
        return summary

    console.print(f"Comparing commits: {this_pr.base.sha}...{this_pr.head.sha}")
    changed = compare_commits(this_repo, this_pr.base.sha, this_pr.head.sha)
    console.print(f"Found {len(changed.files)} changed files")
    anchor = select_anchor_commit(changed) if changed.files else None
    if anchor is not None:
        logger.debug("Anchoring review comments to %s (%s)", anchor.sha, ANCHOR_POLICY)

    for file in changed.files:
        if not file.is_reviewable:
            console.print(f"Skipping file {escape(file.filename)} (status: {file.status})")
            summary.skipped_files.append(file.filename)
            continue

        console.print(f"Processing file: {escape(file.filename)}")
        try:
            process_file(client, this_pr, file, anchor, severities, summary)
        except _FATAL_ERRORS:
            raise
        except Exception as e:
            logger.error("Review for %s failed: %s", file.filename, e)
            summary.failed_files.append(file.filename)
            continue
        summary.reviewed_files.append(file.filename)

    console.print("Finalizing pull request")
    summary.finalized = finalize_pull_request(this_pr, trigger_label)

    console.print(
        f"[green]AI review completed: {summary.total_comments} comment(s) across "
        f"{len(summary.reviewed_files)} file(s).[/green]"
    )
    return summary
