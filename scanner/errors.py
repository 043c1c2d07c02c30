from __future__ import annotations


class ScanError(Exception):
    """Base class for every failure raised by the scanner."""


class AcquisitionError(ScanError):
    pass


class AcquisitionCancelled(AcquisitionError):
    pass


class ExtractionError(ScanError):
    pass


class ConstraintError(ScanError):
    pass


class InspectionError(ScanError):
    pass


class ConfigError(ScanError):
    pass


class InputError(ScanError):
    pass


class FetchError(ScanError):
    pass


__all__ = [
    "ScanError",
    "AcquisitionError",
    "AcquisitionCancelled",
    "ExtractionError",
    "ConstraintError",
    "InspectionError",
    "ConfigError",
    "InputError",
    "FetchError",
]
