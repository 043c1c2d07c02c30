from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List

from scanner.common import read_json, write_json
from scanner.errors import InputError
from scanner.models import Outcome

logger = logging.getLogger(__name__)


def write_report(outcomes: Iterable[Outcome], path: str | Path) -> Path:
    out = Path(path)
    write_json([o.to_record() for o in outcomes], out)
    return out


def load_report(path: str | Path) -> List[Outcome]:
    """Load a report written by ``process``.

    Only an unreadable file or a non-array payload is fatal; individual bad
    entries are skipped with a warning.
    """

    path = Path(path)
    try:
        payload = read_json(path)
    except FileNotFoundError as exc:
        raise InputError(f"could not read JSON file '{path}': file not found") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise InputError(f"failed to parse JSON '{path}': {exc}") from exc

    if not isinstance(payload, list):
        raise InputError(f"report '{path}' must contain a JSON array of results")

    outcomes: List[Outcome] = []
    for index, record in enumerate(payload):
        if not isinstance(record, dict):
            logger.warning("Skipping report entry %d in '%s': not an object", index, path)
            continue
        try:
            outcomes.append(Outcome.from_record(record))
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed report entry %d in '%s': %s", index, path, exc)
    return outcomes
