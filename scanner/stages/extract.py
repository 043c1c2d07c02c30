from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

import hcl2

from scanner.errors import ExtractionError
from scanner.models import ProviderRequirement


def _blocks(value: Any) -> List[Dict[str, Any]]:
    # hcl2 yields lists of block bodies; .tf.json may use a bare object.
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, dict)]
    return []


def _entries(body: Dict[str, Any]) -> Iterable[tuple[str, Any]]:
    # Newer hcl2 releases keep the quotes around block labels.
    for key, value in body.items():
        if key.startswith("__"):
            continue
        yield _unquote(key) or key, value


def _unquote(value: Any) -> str | None:
    if isinstance(value, list) and len(value) == 1:
        value = value[0]
    if not isinstance(value, str):
        return None
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        text = text[1:-1].strip()
    if not text or text.startswith("${"):
        return None
    return text


def _load_file(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            if path.name.endswith(".tf.json"):
                payload = json.load(fh)
            else:
                payload = hcl2.load(fh)
    except Exception as exc:
        raise ExtractionError(f"{path.name}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ExtractionError(f"{path.name}: unexpected top-level structure")
    return payload


def _collect(payload: Dict[str, Any], found: Dict[str, List[str]]) -> None:
    for terraform in _blocks(payload.get("terraform")):
        for required in _blocks(terraform.get("required_providers")):
            for name, spec in _entries(required):
                found.setdefault(name, [])
                if isinstance(spec, list) and len(spec) == 1:
                    spec = spec[0]
                version = _unquote(spec.get("version")) if isinstance(spec, dict) else _unquote(spec)
                if version:
                    found[name].append(version)

    for provider in _blocks(payload.get("provider")):
        for name, body in _entries(provider):
            for config in _blocks(body):
                version = _unquote(config.get("version"))
                if version:
                    found.setdefault(name, []).append(version)


def module_files(module_path: Path) -> List[Path]:
    if not module_path.is_dir():
        raise ExtractionError(f"module directory does not exist: {module_path}")
    files = [p for p in module_path.iterdir() if p.is_file() and (p.suffix == ".tf" or p.name.endswith(".tf.json"))]
    return sorted(files, key=lambda p: p.name)


def parse_terraform_module(module_path: str | Path) -> List[ProviderRequirement]:
    """Return one requirement per declared (provider, constraint) pair."""

    module_path = Path(module_path)
    files = module_files(module_path)
    if not files:
        raise ExtractionError("no Terraform configuration files (*.tf, *.tf.json) found in module root")

    found: Dict[str, List[str]] = {}
    for path in files:
        _collect(_load_file(path), found)

    return [
        ProviderRequirement(provider_name=name, version=constraint)
        for name, constraints in found.items()
        for constraint in constraints
    ]


class TerraformExtractor:
    def extract(self, module_path: Path) -> List[ProviderRequirement]:
        return parse_terraform_module(module_path)
