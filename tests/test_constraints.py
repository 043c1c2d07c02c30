from __future__ import annotations

import pytest

from scanner.errors import ConstraintError
from scanner.stages.constraints import check_version_constraint, parse_constraint


@pytest.mark.parametrize(
    "floor, constraint, expected",
    [
        ("4.0.0", ">=4.0.0", True),
        ("4.0.0", ">= 4.0.0", True),
        ("4.0.0", "~>3.0", False),
        ("4.0.0", "~> 4.0", True),
        ("4.0.0", "~> 4.1", False),
        ("4.0.0", "~> 3", True),
        ("4.0.0", "~> 4.0.1", False),
        ("4.0.5", "~> 4.0.1", True),
        ("4.1.0", "~> 4.0.1", False),
        ("4.0.0", "4.0.0", True),
        ("4.0.0", "= 4.0", True),
        ("4.0.0", "=3.0", False),
        ("4.0.0", "!= 4.0.0", False),
        ("4.0.0", ">= 3.71, < 5.0", True),
        ("4.0.0", ">= 3.0, < 4.0", False),
        ("4.0.0", "> 3.9", True),
        ("4.0.0", "< 4.0.0", False),
        ("2.0.0", "~> 1.13", False),
        ("2.0.0", ">= 1.13.0, < 3.0.0", True),
    ],
)
def test_floor_against_declared_constraint(floor, constraint, expected) -> None:
    assert check_version_constraint(floor, constraint) is expected


def test_floor_is_the_candidate_not_the_range() -> None:
    assert check_version_constraint("4.0.0", "<= 3.9") is False
    assert check_version_constraint("3.9", "<= 4.0.0") is True


def test_prerelease_floor_needs_prerelease_constraint() -> None:
    assert check_version_constraint("4.0.0-beta1", ">= 3.0") is False
    assert check_version_constraint("4.0.0-beta1", ">= 4.0.0-beta1") is True
    assert check_version_constraint("4.0.0-beta1", "~> 4.0") is False
    assert check_version_constraint("4.0.0", ">= 4.0.0-beta1") is True


@pytest.mark.parametrize("constraint", ["not-a-version", "", "   ", ">= abc", ">=>= 1.0", ">= 1.0,"])
def test_invalid_constraint_raises(constraint) -> None:
    with pytest.raises(ConstraintError):
        check_version_constraint("4.0.0", constraint)


def test_invalid_floor_raises() -> None:
    with pytest.raises(ConstraintError, match="failed to parse version"):
        check_version_constraint("banana", ">= 1.0")


def test_parse_constraint_translates_pessimistic_operator() -> None:
    assert str(parse_constraint("~> 3.0")) == "~=3.0"
    assert str(parse_constraint("~> 3")) == ">=3"
