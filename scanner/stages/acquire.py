from __future__ import annotations

import shutil
import tempfile
import threading
from pathlib import Path

from scanner.errors import AcquisitionError

from .git import GitCommandError, run_git

SCRATCH_PREFIX = "repo-"


def clone_repo(
    location: str,
    *,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
    scratch_root: Path | None = None,
) -> Path:
    """Shallow-clone ``location`` into a fresh scratch directory.

    The caller owns the returned directory. On failure nothing is left on disk.
    """

    if not location or not location.strip():
        raise AcquisitionError("repository location is empty")

    scratch = Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX, dir=scratch_root))
    try:
        run_git(["clone", "--depth", "1", location, str(scratch)], timeout=timeout, cancel=cancel)
    except GitCommandError as exc:
        shutil.rmtree(scratch, ignore_errors=True)
        raise AcquisitionError(f"git clone failed: {exc}, output: {exc.output.strip()}") from exc
    except BaseException:
        shutil.rmtree(scratch, ignore_errors=True)
        raise
    return scratch


class GitAcquirer:
    def __init__(self, scratch_root: Path | None = None) -> None:
        self.scratch_root = scratch_root

    def acquire(
        self,
        location: str,
        *,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> Path:
        return clone_repo(location, timeout=timeout, cancel=cancel, scratch_root=self.scratch_root)
