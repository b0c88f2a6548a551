"""Canonical document migrations and the decode-or-reject validation gate.

Every consumer of a stored or imported canonical document goes through
``migrate_workout``: raw JSON in, a validated ``CanonicalWorkout`` out, or a
``CanonicalValidationError``. Steps are registered in ``MIGRATIONS`` in version
order; a released step is never edited, new ones are appended.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

import structlog
from pydantic import ValidationError

from ironlog.core.constants import LEGACY_SCHEMA_VERSION, SCHEMA_VERSION
from ironlog.core.exceptions import CanonicalValidationError
from ironlog.schemas.canonical import CanonicalWorkout

logger = structlog.get_logger(__name__)

Version = tuple[int, int, int]
MigrationStep = Callable[[dict[str, Any]], dict[str, Any]]

SET_FLAGS = ("is_warmup", "is_failure", "is_dropset", "is_deleted")


def parse_version(value: Any) -> Version:
    """Parse "major.minor.patch"; missing components count as 0."""
    if not isinstance(value, str) or not value.strip():
        raise CanonicalValidationError(f"Invalid schema_version: {value!r}")
    parts = value.strip().split(".")
    if len(parts) > 3:
        raise CanonicalValidationError(f"Invalid schema_version: {value!r}")
    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        raise CanonicalValidationError(f"Invalid schema_version: {value!r}") from None
    if any(n < 0 for n in numbers):
        raise CanonicalValidationError(f"Invalid schema_version: {value!r}")
    numbers += [0] * (3 - len(numbers))
    return numbers[0], numbers[1], numbers[2]


def compare_versions(a: str, b: str) -> int:
    """-1, 0 or 1 as a is lower than, equal to or higher than b."""
    va, vb = parse_version(a), parse_version(b)
    return (va > vb) - (va < vb)


def _v0_to_v1(doc: dict[str, Any]) -> dict[str, Any]:
    """Legacy ``weight`` -> ``weight_kg``; default the boolean flags."""
    for exercise in doc.get("exercises") or []:
        if not isinstance(exercise, dict):
            continue
        exercise.setdefault("is_deleted", False)
        for s in exercise.get("sets") or []:
            if not isinstance(s, dict):
                continue
            if "weight" in s:
                if s.get("weight_kg") is None:
                    s["weight_kg"] = s["weight"]
                # Only drop the legacy key once it is provably redundant
                if s["weight"] == s["weight_kg"]:
                    del s["weight"]
            for flag in SET_FLAGS:
                if s.get(flag) is None:
                    s[flag] = False
    doc["schema_version"] = "1.0.0"
    return doc


# (target version, step) in ascending order; a step runs when doc version < target
MIGRATIONS: list[tuple[str, MigrationStep]] = [
    ("1.0.0", _v0_to_v1),
]


def _apply_migrations(doc: dict[str, Any]) -> dict[str, Any]:
    version = doc.get("schema_version") or LEGACY_SCHEMA_VERSION
    doc["schema_version"] = version
    for target, step in MIGRATIONS:
        if compare_versions(doc["schema_version"], target) < 0:
            logger.debug("migrating_canonical_workout", from_version=doc["schema_version"], to_version=target)
            doc = step(doc)
            doc["schema_version"] = target
    return doc


def validate_canonical_workout(doc: Any) -> CanonicalWorkout:
    """Structural checks plus full typed decode. Raises CanonicalValidationError."""
    if not isinstance(doc, dict):
        raise CanonicalValidationError("Canonical workout must be an object")
    workout_id = doc.get("workout_id")
    if not workout_id:
        raise CanonicalValidationError("Canonical workout is missing workout_id")
    if not isinstance(doc.get("metadata"), dict):
        raise CanonicalValidationError("Canonical workout metadata must be an object", workout_id=str(workout_id))
    if not isinstance(doc.get("exercises"), list):
        raise CanonicalValidationError("Canonical workout exercises must be an array", workout_id=str(workout_id))
    try:
        return CanonicalWorkout.model_validate(doc)
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise CanonicalValidationError(
            "Canonical workout failed schema validation", errors=errors, workout_id=str(workout_id)
        ) from e


def migrate_workout(raw: Any) -> CanonicalWorkout:
    """Upgrade a raw canonical document to the current schema and validate it.

    The input is never mutated. Documents newer than this release are accepted
    as-is if they still validate.
    """
    if not isinstance(raw, dict):
        raise CanonicalValidationError("Canonical workout must be an object")
    doc = _apply_migrations(copy.deepcopy(raw))
    if compare_versions(doc["schema_version"], SCHEMA_VERSION) > 0:
        logger.warning(
            "canonical_workout_from_newer_schema",
            schema_version=doc["schema_version"],
            current_version=SCHEMA_VERSION,
            workout_id=str(doc.get("workout_id")),
        )
    return validate_canonical_workout(doc)
