from __future__ import annotations

from github import Auth, Github

from prreviewer_core.models import ChangedFileSet, FileChange


def get_repo(repo_name: str, token: str):
    # lazy=True: no request until an attribute or sub-resource is needed.
    return Github(auth=Auth.Token(token)).get_repo(repo_name, lazy=True)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def has_label(pr, label_name: str) -> bool:
    return any(label.name == label_name for label in pr.labels)


def is_locked(pr) -> bool:
    return bool(pr.raw_data.get("locked", False))


def compare_commits(repo, base_sha: str, head_sha: str) -> ChangedFileSet:
    """Return the files and commits between two SHAs using GitHub's compare API."""
    comparison = repo.compare(base_sha, head_sha)
    return ChangedFileSet(
        files=[FileChange.from_github(f) for f in comparison.files],
        commits=list(comparison.commits),
    )


def create_review_comment(pr, commit, path: str, line: int, body: str):
    """Post one inline comment on the new (RIGHT) side of the diff."""
    return pr.create_review_comment(body=body, commit=commit, path=path, line=line, side="RIGHT")


def remove_label(pr, label_name: str) -> None:
    pr.remove_from_labels(label_name)


def approve(pr, body: str):
    return pr.create_review(body=body, event="APPROVE")
