from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence

from scanner.models import ErrorKind, Outcome, WorkItem

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class Processor(Protocol):
    cancel: threading.Event

    def process(self, item: WorkItem) -> Outcome:
        ...


@dataclass
class BatchResult:
    outcomes: List[Outcome]
    interrupted: bool = False


class _Collector:
    """Result slots and completion counter shared by all workers."""

    def __init__(self, total: int, on_progress: ProgressCallback | None) -> None:
        self.slots: List[Optional[Outcome]] = [None] * total
        self.completed = 0
        self.total = total
        self._on_progress = on_progress
        self._lock = threading.Lock()

    def store(self, index: int, outcome: Outcome) -> None:
        with self._lock:
            if self.slots[index] is not None:
                return
            self.slots[index] = outcome
            self.completed += 1
            done = self.completed
            if self._on_progress is not None:
                self._on_progress(done, self.total)


def _run_one(processor: Processor, collector: _Collector, index: int, item: WorkItem) -> None:
    try:
        outcome = processor.process(item)
    except Exception as exc:
        logger.exception("Unexpected failure while processing '%s'", item.repo_url)
        outcome = Outcome.failed(item, ErrorKind.INTERNAL, f"unexpected error processing repo '{item.repo_url}': {exc}")
    collector.store(index, outcome)


def run_batch(
    items: Sequence[WorkItem],
    processor: Processor,
    workers: int = 5,
    *,
    on_progress: ProgressCallback | None = None,
) -> BatchResult:
    """Process ``items`` on ``workers`` threads and return one outcome per item.

    Outcomes keep the input order. On ``KeyboardInterrupt`` queued items are
    dropped, in-flight items are asked to stop via ``processor.cancel`` and the
    unfinished ones are reported as cancelled.
    """

    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    collector = _Collector(len(items), on_progress)
    interrupted = False
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scan-worker")
    try:
        futures: List[Future] = [
            executor.submit(_run_one, processor, collector, index, item) for index, item in enumerate(items)
        ]
        wait(futures)
    except KeyboardInterrupt:
        interrupted = True
        logger.warning("Interrupted; cancelling queued items and waiting for in-flight clones to stop")
        processor.cancel.set()
        executor.shutdown(wait=True, cancel_futures=True)
    finally:
        executor.shutdown(wait=True)

    outcomes: List[Outcome] = []
    for index, item in enumerate(items):
        outcome = collector.slots[index]
        if outcome is None:
            outcome = Outcome.failed(item, ErrorKind.CANCELLED, f"processing cancelled for repo '{item.repo_url}'")
        outcomes.append(outcome)
    return BatchResult(outcomes=outcomes, interrupted=interrupted)
