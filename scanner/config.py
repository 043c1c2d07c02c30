from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from packaging.version import InvalidVersion, Version

from scanner.common import getenv
from scanner.errors import ConfigError

CONFIG_ENV = "AVM_CHECK_CONFIG"

DEFAULT_TRACKED_PROVIDERS: Dict[str, str] = {
    "azurerm": "4.0.0",
    "azapi": "2.0.0",
}

DEFAULT_CLONE_TIMEOUT = 300.0


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    delay_seconds: float = 2.0


@dataclass(frozen=True)
class PipelineConfig:
    tracked_providers: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_TRACKED_PROVIDERS))
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    clone_timeout: float | None = DEFAULT_CLONE_TIMEOUT
    quiet: bool = False

    def __post_init__(self) -> None:
        if self.retry.attempts < 1:
            raise ConfigError(f"retry attempts must be at least 1, got {self.retry.attempts}")
        if self.retry.delay_seconds < 0:
            raise ConfigError(f"retry delay must not be negative, got {self.retry.delay_seconds}")
        if self.clone_timeout is not None and self.clone_timeout <= 0:
            raise ConfigError(f"clone timeout must be positive, got {self.clone_timeout}")
        for name, floor in self.tracked_providers.items():
            try:
                Version(str(floor))
            except InvalidVersion as exc:
                raise ConfigError(f"invalid minimum version '{floor}' for provider '{name}'") from exc


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"could not parse config file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return payload


def load_config(path: str | Path | None = None, **overrides: Any) -> PipelineConfig:
    """Build a PipelineConfig from an optional YAML file plus keyword overrides.

    When ``path`` is omitted the ``AVM_CHECK_CONFIG`` environment variable is
    consulted. Overrides set to ``None`` are ignored.
    """

    path = path or getenv(CONFIG_ENV)
    payload: Dict[str, Any] = _read_yaml(Path(path)) if path else {}

    tracked = payload.get("tracked_providers", DEFAULT_TRACKED_PROVIDERS)
    if not isinstance(tracked, dict) or not tracked:
        raise ConfigError("tracked_providers must be a non-empty mapping of provider name to minimum version")
    for name, floor in tracked.items():
        if not isinstance(floor, str):
            raise ConfigError(f"minimum version for provider '{name}' must be a quoted string, got {floor!r}")
    tracked = {str(k): v for k, v in tracked.items()}

    retry_payload = payload.get("retry") or {}
    attempts = overrides.get("attempts") or retry_payload.get("attempts", RetryPolicy.attempts)
    delay = overrides.get("delay_seconds")
    if delay is None:
        delay = retry_payload.get("delay_seconds", RetryPolicy.delay_seconds)

    clone_timeout = overrides.get("clone_timeout")
    if clone_timeout is None:
        clone_timeout = payload.get("clone_timeout", DEFAULT_CLONE_TIMEOUT)

    try:
        return PipelineConfig(
            tracked_providers=tracked,
            retry=RetryPolicy(attempts=int(attempts), delay_seconds=float(delay)),
            clone_timeout=float(clone_timeout) if clone_timeout else None,
            quiet=bool(overrides.get("quiet", False)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid configuration value: {exc}") from exc
