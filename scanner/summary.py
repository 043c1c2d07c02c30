from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List

import pandas as pd

from scanner.models import ErrorKind, Outcome

DORMANT_MONTHS = 6


@dataclass(frozen=True)
class Summary:
    total: int
    unreachable: int
    non_compliant: int
    dormant: int


@dataclass
class Categories:
    total: int = 0
    unreachable: List[Outcome] = field(default_factory=list)
    non_compliant: List[Outcome] = field(default_factory=list)
    dormant: List[Outcome] = field(default_factory=list)

    def summary(self) -> Summary:
        return Summary(
            total=self.total,
            unreachable=len(self.unreachable),
            non_compliant=len(self.non_compliant),
            dormant=len(self.dormant),
        )


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def dormant_threshold(now: datetime | None = None, months: int = DORMANT_MONTHS) -> datetime:
    now = _utc(now or datetime.now(timezone.utc))
    return (pd.Timestamp(now) - pd.DateOffset(months=months)).to_pydatetime()


def parse_commit_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError, AttributeError):
        return None
    return _utc(parsed)


def is_unreachable(outcome: Outcome) -> bool:
    return outcome.error_kind is ErrorKind.ACQUISITION_FAILED


def is_non_compliant(outcome: Outcome) -> bool:
    return any(not ok for ok in outcome.compatibility.values())


def is_dormant(outcome: Outcome, threshold: datetime) -> bool:
    stamp = parse_commit_date(outcome.last_commit_date)
    return stamp is not None and stamp < threshold


def categorize(outcomes: Iterable[Outcome], now: datetime | None = None) -> Categories:
    threshold = dormant_threshold(now)
    cats = Categories()
    for outcome in outcomes:
        cats.total += 1
        if is_unreachable(outcome):
            cats.unreachable.append(outcome)
        if is_non_compliant(outcome):
            cats.non_compliant.append(outcome)
        if is_dormant(outcome, threshold):
            cats.dormant.append(outcome)
    return cats


def summarize(outcomes: Iterable[Outcome], now: datetime | None = None) -> Summary:
    return categorize(outcomes, now).summary()
