"""Terraform version-constraint evaluation on top of ``packaging``.

Terraform writes constraints as comma-separated clauses such as
``">= 3.71, < 5.0"`` or ``"~> 3.0"``. Each clause is translated to its PEP 440
equivalent and the whole expression is checked with a ``SpecifierSet``:

* a bare version or ``=`` is an exact pin (``==``)
* ``~> X.Y`` / ``~> X.Y.Z`` is the compatible-release operator (``~=``)
* ``~> X`` only fixes the lower bound, since ``~=`` needs two segments
"""

from __future__ import annotations

import re
from typing import List

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from scanner.errors import ConstraintError

_CLAUSE_RE = re.compile(r"^\s*(~>|>=|<=|!=|=|>|<)?\s*(\S+)\s*$")


def parse_version(value: str) -> Version:
    try:
        return Version(value.strip())
    except InvalidVersion as exc:
        raise ConstraintError(f"failed to parse version '{value}': {exc}") from exc


def _translate_clause(clause: str, expression: str) -> str:
    match = _CLAUSE_RE.match(clause)
    if not match:
        raise ConstraintError(f"failed to parse constraint '{expression}': malformed clause '{clause.strip()}'")
    op, raw = match.group(1) or "=", match.group(2)
    try:
        version = Version(raw)
    except InvalidVersion as exc:
        raise ConstraintError(f"failed to parse constraint '{expression}': {exc}") from exc

    if op == "=":
        return f"=={version}"
    if op == "~>":
        if len(version.release) == 1:
            return f">={version}"
        return f"~={version}"
    return f"{op}{version}"


def parse_constraint(expression: str) -> SpecifierSet:
    if not expression or not expression.strip():
        raise ConstraintError("failed to parse constraint '': empty expression")
    parts: List[str] = [_translate_clause(clause, expression) for clause in expression.split(",")]
    try:
        return SpecifierSet(",".join(parts))
    except InvalidSpecifier as exc:
        raise ConstraintError(f"failed to parse constraint '{expression}': {exc}") from exc


def check_version_constraint(current_version: str, constraint: str) -> bool:
    """True when ``current_version`` is admitted by ``constraint``.

    ``current_version`` is the configured floor, ``constraint`` the expression a
    module declares. Swapping the arguments changes the answer.
    """

    version = parse_version(current_version)
    specifiers = parse_constraint(constraint)
    # A pre-release only satisfies constraints that name a pre-release themselves.
    if version.is_prerelease and not any(Version(spec.version).is_prerelease for spec in specifiers):
        return False
    return specifiers.contains(version, prereleases=True)
