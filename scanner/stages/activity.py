from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from scanner.errors import InspectionError

from .base import CommitInfo
from .git import GitCommandError, run_git

LOG_FORMAT = "%ct|%an"


def last_commit_info(repo_path: str | Path, *, timeout: float | None = None) -> CommitInfo:
    """Read the newest commit's time (UTC, ISO-8601) and author name."""

    try:
        out = run_git(["-C", str(repo_path), "log", "-1", f"--format={LOG_FORMAT}"], timeout=timeout)
    except GitCommandError as exc:
        raise InspectionError(f"failed to get last commit: {exc}") from exc

    line = out.strip()
    if not line:
        raise InspectionError("repository has no commit history")
    parts = line.split("|", 1)
    if len(parts) != 2:
        raise InspectionError("unexpected format for last commit info")

    epoch_str, author = parts[0].strip(), parts[1].strip()
    try:
        epoch = int(epoch_str)
    except ValueError as exc:
        raise InspectionError(f"invalid epoch time '{epoch_str}'") from exc

    stamp = datetime.fromtimestamp(epoch, tz=timezone.utc)
    return CommitInfo(date=stamp.isoformat(), author=author)


class GitActivityInspector:
    def last_activity(self, repo_path: Path, *, timeout: float | None = None) -> CommitInfo:
        return last_commit_info(repo_path, timeout=timeout)
