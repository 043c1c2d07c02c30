from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

from scanner.errors import InputError
from scanner.models import WorkItem


def load_work_items(path: str | Path = "modules.csv") -> List[WorkItem]:
    path = Path(path)
    if not path.exists():
        raise InputError(f"input CSV not found: {path}")

    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError as exc:
        raise InputError("empty CSV file") from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise InputError(f"could not parse CSV {path}: {exc}") from exc

    df.columns = [str(col).strip() for col in df.columns]
    return [WorkItem.from_row(row) for row in df.to_dict(orient="records")]
