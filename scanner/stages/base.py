from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol

from scanner.models import ProviderRequirement


@dataclass(frozen=True)
class CommitInfo:
    date: str
    author: str


class ContentAcquirer(Protocol):
    def acquire(
        self,
        location: str,
        *,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> Path:
        ...


class RequirementExtractor(Protocol):
    def extract(self, module_path: Path) -> List[ProviderRequirement]:
        ...


class ActivityInspector(Protocol):
    def last_activity(self, repo_path: Path, *, timeout: float | None = None) -> CommitInfo:
        ...
