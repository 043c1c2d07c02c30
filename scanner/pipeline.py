from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path

from scanner.config import PipelineConfig
from scanner.errors import AcquisitionCancelled, AcquisitionError, ConstraintError, ExtractionError, InspectionError
from scanner.models import CLONE_FAILURE_PREFIX, ErrorKind, Outcome, WorkItem
from scanner.stages.acquire import GitAcquirer
from scanner.stages.activity import GitActivityInspector
from scanner.stages.base import ActivityInspector, ContentAcquirer, RequirementExtractor
from scanner.stages.constraints import check_version_constraint
from scanner.stages.extract import TerraformExtractor

logger = logging.getLogger(__name__)


class ItemPipeline:
    """Clone, parse, check and inspect a single module repository.

    Each call to :meth:`process` owns the scratch clone it creates and removes
    it before returning, whichever stage fails.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        acquirer: ContentAcquirer | None = None,
        extractor: RequirementExtractor | None = None,
        inspector: ActivityInspector | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.acquirer = acquirer or GitAcquirer()
        self.extractor = extractor or TerraformExtractor()
        self.inspector = inspector or GitActivityInspector()
        self.cancel = cancel or threading.Event()

    def _clone_with_retry(self, item: WorkItem) -> Path:
        policy = self.config.retry
        attempt = 1
        while True:
            if self.cancel.is_set():
                raise AcquisitionCancelled("run cancelled before clone")
            try:
                return self.acquirer.acquire(item.repo_url, timeout=self.config.clone_timeout, cancel=self.cancel)
            except AcquisitionCancelled:
                raise
            except AcquisitionError as exc:
                if not self.config.quiet:
                    logger.warning("Attempt %d: Failed to clone repo '%s': %s", attempt, item.repo_url, exc)
                if attempt >= policy.attempts:
                    raise
            if self.cancel.wait(policy.delay_seconds):
                raise AcquisitionCancelled("run cancelled while waiting to retry clone")
            attempt += 1

    def process(self, item: WorkItem) -> Outcome:
        outcome = Outcome(item=item)

        try:
            repo_path = self._clone_with_retry(item)
        except AcquisitionCancelled as exc:
            outcome.fail(ErrorKind.CANCELLED, f"processing cancelled for repo '{item.repo_url}': {exc}")
            return outcome
        except AcquisitionError as exc:
            outcome.fail(ErrorKind.ACQUISITION_FAILED, f"{CLONE_FAILURE_PREFIX} '{item.repo_url}': {exc}")
            return outcome

        try:
            self._inspect_clone(outcome, repo_path)
        finally:
            shutil.rmtree(repo_path, ignore_errors=True)
        return outcome

    def _inspect_clone(self, outcome: Outcome, repo_path: Path) -> None:
        try:
            providers = self.extractor.extract(repo_path)
        except ExtractionError as exc:
            outcome.fail(ErrorKind.EXTRACTION_FAILED, f"failed to parse Terraform module: {exc}")
            return
        outcome.providers = list(providers)

        tracked = self.config.tracked_providers
        for provider in outcome.providers:
            floor = tracked.get(provider.provider_name)
            if floor is None:
                continue
            try:
                valid = check_version_constraint(floor, provider.version)
            except ConstraintError as exc:
                outcome.fail(
                    ErrorKind.EVALUATION_FAILED,
                    f"failed to check version constraints for provider '{provider.provider_name}': {exc}",
                )
                return
            outcome.compatibility[provider.provider_name] = valid

        try:
            info = self.inspector.last_activity(repo_path, timeout=self.config.clone_timeout)
        except InspectionError as exc:
            if not self.config.quiet:
                logger.warning("Could not retrieve last commit for '%s': %s", outcome.repo_url, exc)
            message = f"could not retrieve last commit info: {exc}"
            outcome.error = f"{outcome.error} | {message}" if outcome.error else message
            if outcome.error_kind is None:
                outcome.error_kind = ErrorKind.INSPECTION_FAILED
            return
        outcome.last_commit_date = info.date
        outcome.last_commit_author = info.author
