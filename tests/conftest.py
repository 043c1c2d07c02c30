from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Callable, Dict

import pytest

from scanner.errors import AcquisitionError, InspectionError
from scanner.models import WorkItem
from scanner.stages.base import CommitInfo

VERSIONS_TF = """
terraform {
  required_version = ">= 1.9, < 2.0"
  required_providers {
    azurerm = {
      source  = "hashicorp/azurerm"
      version = ">= 3.116, < 5.0"
    }
    azapi = {
      source  = "Azure/azapi"
      version = "~> 1.13"
    }
    random = {
      source  = "hashicorp/random"
      version = "~> 3.5"
    }
  }
}
"""

COMMIT_MARKER = "COMMIT_INFO"

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def make_item(url: str, **fields: str) -> WorkItem:
    return WorkItem.from_row({"RepoURL": url, "ModuleName": url.rsplit("/", 1)[-1], **fields})


class FakeAcquirer:
    """Materializes canned module files instead of cloning.

    ``repos`` maps a URL to the files its clone contains; ``failures`` maps a URL
    to the number of attempts that fail before one succeeds (``-1`` = always).
    """

    def __init__(self, root: Path, repos: Dict[str, Dict[str, str]] | None = None, failures: Dict[str, int] | None = None):
        self.root = root
        self.repos = repos or {}
        self.failures = failures or {}
        self.attempts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def acquire(self, location, *, timeout=None, cancel=None):
        with self._lock:
            count = self.attempts.get(location, 0) + 1
            self.attempts[location] = count
        budget = self.failures.get(location, 0)
        if budget < 0 or count <= budget:
            raise AcquisitionError(f"git clone failed: attempt {count} for {location}")
        scratch = Path(tempfile.mkdtemp(prefix="repo-", dir=self.root))
        for name, content in self.repos.get(location, {}).items():
            (scratch / name).write_text(content, encoding="utf-8")
        return scratch


class FakeInspector:
    """Reads ``date|author`` from a marker file written by FakeAcquirer."""

    def last_activity(self, repo_path, *, timeout=None):
        marker = Path(repo_path) / COMMIT_MARKER
        if not marker.exists():
            raise InspectionError("repository has no commit history")
        date, author = marker.read_text(encoding="utf-8").strip().split("|", 1)
        return CommitInfo(date=date, author=author)


class RecordingEvent(threading.Event):
    """Event whose timed waits are recorded and return immediately."""

    def __init__(self) -> None:
        super().__init__()
        self.waits: list = []

    def wait(self, timeout=None):
        if timeout is None:
            return super().wait()
        self.waits.append(timeout)
        return self.is_set()


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    root = tmp_path / "scratch"
    root.mkdir()
    return root


def _git(cwd: Path, *args: str, env: Dict[str, str] | None = None) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True, env=env)


@pytest.fixture
def git_repo(tmp_path: Path) -> Callable[..., Path]:
    """Factory building a committed local repository from a file mapping."""

    def build(name: str, files: Dict[str, str], *, date: str = "2024-01-02T03:04:05+00:00", author: str = "Test Author") -> Path:
        repo = tmp_path / "remotes" / name
        repo.mkdir(parents=True)
        _git(repo, "init", "-q")
        for filename, content in files.items():
            (repo / filename).write_text(content, encoding="utf-8")
        _git(repo, "add", "-A")
        env = dict(os.environ)
        env.update(
            {
                "GIT_AUTHOR_NAME": author,
                "GIT_AUTHOR_EMAIL": "author@example.com",
                "GIT_COMMITTER_NAME": author,
                "GIT_COMMITTER_EMAIL": "author@example.com",
                "GIT_AUTHOR_DATE": date,
                "GIT_COMMITTER_DATE": date,
            }
        )
        _git(repo, "-c", "commit.gpgsign=false", "commit", "-q", "-m", "initial", env=env)
        return repo

    return build
