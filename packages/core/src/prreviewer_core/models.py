"""Review data models.

Everything here is request-scoped: built during a single run and discarded
when it finishes. ReviewResult.from_dict is the only gate between raw model
output and the rest of the pipeline, so every shape check lives there.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from prreviewer_core.errors import MalformedResponseError
from prreviewer_core.prompt import generate_prompt

SEVERITIES = ("low", "medium", "high")
CATEGORIES = ("bug", "security", "performance", "style", "best_practice")


@dataclass
class ReviewRequest:
    """A single changed file handed to the prompt builder."""

    diff_text: str
    file_name: str

    def to_prompt(self) -> str:
        return generate_prompt(self.diff_text, self.file_name)


@dataclass
class ReviewItem:
    """One finding returned by the model for a file."""

    comment: str
    line_number: int
    severity: str
    category: str
    language: str = ""
    suggestion: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ReviewItem:
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Review item must be an object, got {type(data).__name__}")

        comment = data.get("comment")
        if not isinstance(comment, str) or not comment.strip():
            raise MalformedResponseError("Review item is missing a non-empty 'comment'")

        line = data.get("lineNumber")
        # bool is a subclass of int; reject it explicitly.
        if isinstance(line, bool) or not isinstance(line, int) or line < 1:
            raise MalformedResponseError(f"Review item has invalid 'lineNumber': {line!r}")

        severity = data.get("severity")
        if severity not in SEVERITIES:
            raise MalformedResponseError(f"Review item has unknown 'severity': {severity!r}")

        category = data.get("category")
        if category not in CATEGORIES:
            raise MalformedResponseError(f"Review item has unknown 'category': {category!r}")

        language = data.get("language") or ""
        if not isinstance(language, str):
            raise MalformedResponseError(f"Review item has invalid 'language': {language!r}")

        suggestion = data.get("suggestion")
        if suggestion is not None and not isinstance(suggestion, str):
            raise MalformedResponseError(f"Review item has invalid 'suggestion': {suggestion!r}")

        return cls(
            comment=comment.strip(),
            line_number=line,
            severity=severity,
            category=category,
            language=language,
            suggestion=suggestion or None,
        )


@dataclass
class ReviewResult:
    """Parsed model response for one file."""

    has_review: bool
    reviews: list[ReviewItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> ReviewResult:
        """Validate a decoded JSON payload and build a ReviewResult.

        Raises MalformedResponseError when the payload does not match the
        expected shape, so a bad reply fails here instead of deeper in the
        comment-posting code.
        """
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Review payload must be a JSON object, got {type(data).__name__}")

        has_review = data.get("hasReview")
        if not isinstance(has_review, bool):
            raise MalformedResponseError(f"Review payload has invalid 'hasReview': {has_review!r}")
        if not has_review:
            # Nothing gets posted, so whatever sits in "reviews" is ignored.
            return cls(has_review=False)

        raw_reviews = data.get("reviews", [])
        if raw_reviews is None:
            raw_reviews = []
        if not isinstance(raw_reviews, list):
            raise MalformedResponseError("Review payload field 'reviews' must be a list")

        return cls(has_review=has_review, reviews=[ReviewItem.from_dict(r) for r in raw_reviews])


@dataclass
class FileChange:
    """A file touched between the base and head commits."""

    filename: str
    status: str  # "added" | "modified" | "removed" | "renamed" | ...
    patch: str | None = None

    @classmethod
    def from_github(cls, file) -> FileChange:
        return cls(filename=file.filename, status=file.status, patch=file.patch)

    @property
    def is_reviewable(self) -> bool:
        return self.status in ("added", "modified")


@dataclass
class ChangedFileSet:
    """Files and commits in the compared range, fetched once per run.

    Commits are kept as PyGithub Commit objects because the review-comment
    endpoint needs one to anchor each comment.
    """

    files: list[FileChange] = field(default_factory=list)
    commits: list = field(default_factory=list)


@dataclass
class ReviewSummary:
    """Outcome of run_review, used by the CLI for its final report."""

    repo: str
    pr_number: int
    head_sha: str | None = None
    skipped_reason: str | None = None
    reviewed_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)
    total_comments: int = 0
    finalized: bool = False
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
