"""Read the triggering pull request from the GitHub Actions event payload."""

from __future__ import annotations

import json
from pathlib import Path

from prreviewer_core.errors import ConfigError


def pull_number_from_event(event_path: str | None) -> int:
    """Return the PR number from the event JSON at ``event_path``.

    pull_request events carry ``pull_request.number``; issue_comment and
    other issue events on a PR only carry ``issue.number``.
    """
    if not event_path:
        raise ConfigError("GITHUB_EVENT_PATH is not set; pass --pr explicitly.")
    path = Path(event_path)
    if not path.exists():
        raise ConfigError(f"Event payload not found: {event_path}")

    payload = json.loads(path.read_text(encoding="utf-8"))
    for key in ("pull_request", "issue"):
        number = (payload.get(key) or {}).get("number")
        if number is not None:
            return int(number)
    raise ConfigError("Event payload does not reference a pull request.")
