from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)

URL_COLUMN = "RepoURL"
CLONE_FAILURE_PREFIX = "failed to clone repo"

# Column layout of the AVM Terraform resource module index.
KNOWN_COLUMNS = (
    "ProviderNamespace",
    "ResourceType",
    "ModuleDisplayName",
    "AlternativeNames",
    "ModuleName",
    "ModuleStatus",
    "RepoURL",
    "PublicRegistryReference",
    "TelemetryIdPrefix",
    "PrimaryModuleOwnerGHHandle",
    "PrimaryModuleOwnerDisplayName",
    "SecondaryModuleOwnerGHHandle",
    "SecondaryModuleOwnerDisplayName",
    "ModuleOwnersGHTeam",
    "ModuleContributorsGHTeam",
    "Description",
    "Comments",
    "FirstPublishedIn",
)

RESULT_KEYS = (
    "providers",
    "compatibility",
    "last_commit_date",
    "last_commit_author",
    "error",
    "error_kind",
)


class ErrorKind(str, Enum):
    ACQUISITION_FAILED = "acquisition_failed"
    EXTRACTION_FAILED = "extraction_failed"
    EVALUATION_FAILED = "evaluation_failed"
    INSPECTION_FAILED = "inspection_failed"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


@dataclass(frozen=True)
class WorkItem:
    """One target repository read from the module index.

    ``fields`` keeps every input column in input order; only ``repo_url`` is
    interpreted by the pipeline.
    """

    repo_url: str
    fields: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "WorkItem":
        values: Dict[str, str] = {name: "" for name in KNOWN_COLUMNS}
        for key, value in row.items():
            if key in RESULT_KEYS:
                continue
            values[str(key)] = "" if value is None else str(value)
        return cls(repo_url=values[URL_COLUMN], fields=values)


@dataclass(frozen=True)
class ProviderRequirement:
    provider_name: str
    version: str

    def to_dict(self) -> Dict[str, str]:
        return {"provider_name": self.provider_name, "version": self.version}


@dataclass
class Outcome:
    item: WorkItem
    providers: List[ProviderRequirement] = field(default_factory=list)
    compatibility: Dict[str, bool] = field(default_factory=dict)
    last_commit_date: str | None = None
    last_commit_author: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def failed(cls, item: WorkItem, kind: ErrorKind, message: str) -> "Outcome":
        return cls(item=item, error=message, error_kind=kind)

    @property
    def repo_url(self) -> str:
        return self.item.repo_url

    def fail(self, kind: ErrorKind, message: str) -> None:
        self.error = message
        self.error_kind = kind

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = dict(self.item.fields)
        record["providers"] = [p.to_dict() for p in self.providers]
        record["compatibility"] = dict(self.compatibility)
        if self.last_commit_date:
            record["last_commit_date"] = self.last_commit_date
        if self.last_commit_author:
            record["last_commit_author"] = self.last_commit_author
        if self.error:
            record["error"] = self.error
        if self.error_kind is not None:
            record["error_kind"] = self.error_kind.value
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Outcome":
        """Rebuild an outcome from a report record, dropping values of the wrong type."""

        item = WorkItem.from_row(record)
        providers = [
            ProviderRequirement(provider_name=str(p.get("provider_name", "")), version=str(p.get("version", "")))
            for p in _as_list(record.get("providers"))
            if isinstance(p, dict)
        ]

        compatibility: Dict[str, bool] = {}
        raw_compat = record.get("compatibility")
        for name, value in (raw_compat.items() if isinstance(raw_compat, dict) else ()):
            if isinstance(value, bool):
                compatibility[str(name)] = value
            else:
                logger.warning("Ignoring non-boolean compatibility.%s=%r for '%s'", name, value, item.repo_url)

        error = _text(record.get("error"))
        kind = _error_kind(record.get("error_kind"), item.repo_url)
        if kind is None and error and error.startswith(CLONE_FAILURE_PREFIX):
            kind = ErrorKind.ACQUISITION_FAILED

        return cls(
            item=item,
            providers=providers,
            compatibility=compatibility,
            last_commit_date=_text(record.get("last_commit_date")),
            last_commit_author=_text(record.get("last_commit_author")),
            error=error,
            error_kind=kind,
        )


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value)
    return text or None


def _error_kind(value: Any, repo_url: str) -> ErrorKind | None:
    if not value:
        return None
    try:
        return ErrorKind(value)
    except (ValueError, TypeError):
        logger.warning("Ignoring unknown error_kind %r for '%s'", value, repo_url)
        return None


__all__ = [
    "ErrorKind",
    "KNOWN_COLUMNS",
    "Outcome",
    "ProviderRequirement",
    "RESULT_KEYS",
    "URL_COLUMN",
    "WorkItem",
]
