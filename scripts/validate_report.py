#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from inventory.loader import load_work_items
from scanner.errors import InputError
from scanner.models import URL_COLUMN, ErrorKind

REQUIRED_FIELDS = [URL_COLUMN, "providers", "compatibility"]
KNOWN_KINDS = {kind.value for kind in ErrorKind}


def _read_json(path: Path):
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def _validate_entry(index: int, entry: Dict, errors: List[str], warnings: List[str]) -> None:
    label = entry.get(URL_COLUMN) or f"entry #{index}"

    for field in REQUIRED_FIELDS:
        if field not in entry:
            errors.append(f"Record {label} missing required field: {field}")

    providers = entry.get("providers") or []
    if not isinstance(providers, list):
        errors.append(f"Record {label} providers must be a list")
        providers = []
    names = set()
    for provider in providers:
        if not isinstance(provider, dict) or not provider.get("provider_name") or "version" not in provider:
            errors.append(f"Record {label} has malformed provider entry: {provider!r}")
            continue
        names.add(provider["provider_name"])

    compatibility = entry.get("compatibility") or {}
    if not isinstance(compatibility, dict):
        errors.append(f"Record {label} compatibility must be an object")
        compatibility = {}
    for name, value in compatibility.items():
        if not isinstance(value, bool):
            errors.append(f"Record {label} compatibility.{name} is not a boolean")
        if name not in names:
            errors.append(f"Record {label} compatibility.{name} has no matching provider entry")

    kind = entry.get("error_kind")
    if kind is not None and kind not in KNOWN_KINDS:
        errors.append(f"Record {label} has unknown error_kind: {kind}")
    if entry.get("error") and kind is None:
        warnings.append(f"Record {label} has error text but no error_kind")
    if kind == ErrorKind.ACQUISITION_FAILED.value and (providers or compatibility):
        errors.append(f"Record {label} failed to clone but carries provider data")

    stamp = entry.get("last_commit_date")
    if stamp:
        try:
            parsed = datetime.fromisoformat(str(stamp).replace("Z", "+00:00"))
        except ValueError:
            errors.append(f"Record {label} last_commit_date is not ISO-8601: {stamp}")
        else:
            if parsed.tzinfo is None:
                warnings.append(f"Record {label} last_commit_date has no timezone offset")
    elif not entry.get("error"):
        warnings.append(f"Record {label} has neither last_commit_date nor error")


def run(report_path: str, input_path: str | None = None, fail_on_warning: bool = False) -> int:
    errors: List[str] = []
    warnings: List[str] = []

    try:
        report = _read_json(Path(report_path))
    except json.JSONDecodeError as exc:
        errors.append(f"Report is not valid JSON: {exc}")
        return print_result(errors, warnings, fail_on_warning)
    if report is None:
        errors.append(f"Report not found: {report_path}")
        return print_result(errors, warnings, fail_on_warning)
    if not isinstance(report, list):
        errors.append("Report must be a JSON array")
        return print_result(errors, warnings, fail_on_warning)

    for index, entry in enumerate(report):
        if not isinstance(entry, dict):
            errors.append(f"Entry #{index} is not an object")
            continue
        _validate_entry(index, entry, errors, warnings)

    if input_path:
        try:
            items = load_work_items(input_path)
        except InputError as exc:
            errors.append(f"Input CSV could not be loaded: {exc}")
        else:
            if len(items) != len(report):
                errors.append(f"Report has {len(report)} records but input has {len(items)} rows")
            expected = sorted(item.repo_url for item in items)
            actual = sorted(str(e.get(URL_COLUMN, "")) for e in report if isinstance(e, dict))
            if expected != actual:
                warnings.append("Report repository URLs differ from the input CSV")

    return print_result(errors, warnings, fail_on_warning)


def print_result(errors: List[str], warnings: List[str], fail_on_warning: bool = False) -> int:
    if errors:
        print("Report validation failed with errors:")
        for item in errors:
            print(f"- ERROR: {item}")
    else:
        print("Report validation errors: none")

    if warnings:
        print("Report validation warnings:")
        for item in warnings:
            print(f"- WARNING: {item}")

    if errors or (fail_on_warning and warnings):
        return 1
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate a provider-constraint report")
    parser.add_argument("--report", default="output.json")
    parser.add_argument("--input", default=None, help="CSV the report was produced from")
    parser.add_argument("--fail-on-warning", action="store_true", default=False)
    args = parser.parse_args()

    raise SystemExit(run(args.report, args.input, args.fail_on_warning))


if __name__ == "__main__":
    main()
