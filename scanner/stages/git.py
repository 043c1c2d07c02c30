from __future__ import annotations

import subprocess
import threading
import time
from typing import Sequence

from scanner.errors import AcquisitionCancelled, ScanError

GIT_BINARY = "git"
_POLL_SECONDS = 0.25


class GitCommandError(ScanError):
    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


def run_git(
    args: Sequence[str],
    *,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> str:
    """Run ``git`` with ``args`` and return its combined stdout/stderr.

    The child is killed when ``timeout`` elapses or ``cancel`` is set, so a
    hung fetch never blocks the calling worker indefinitely.
    """

    cmd = [GIT_BINARY, *args]
    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
        )
    except OSError as exc:
        raise GitCommandError(f"could not start git: {exc}") from exc

    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        try:
            output, _ = proc.communicate(timeout=_POLL_SECONDS)
            break
        except subprocess.TimeoutExpired:
            if cancel is not None and cancel.is_set():
                _kill(proc)
                raise AcquisitionCancelled("git command cancelled")
            if deadline is not None and time.monotonic() >= deadline:
                output = _kill(proc)
                raise GitCommandError(f"git {args[0]} timed out after {timeout:g}s", output)

    if proc.returncode != 0:
        raise GitCommandError(f"git {args[0]} exited with status {proc.returncode}", output or "")
    return output or ""


def _kill(proc: subprocess.Popen) -> str:
    proc.kill()
    output, _ = proc.communicate()
    return output or ""
