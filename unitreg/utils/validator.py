"""Validator — pure predicates over raw unit field values.

Every predicate is total: anything that is not a value of the expected
type is simply invalid. ``check_unit_fields`` collects human-readable
issues for display; ``first_unit_field_error`` maps the first failing
field to the registry error it raises.
"""

from __future__ import annotations

from typing import Any

from unitreg.registry.errors import (
    BoundaryBreach,
    InvalidEncoding,
    RegistryError,
    StructureViolation,
)


SIGNATURE_MAX = 64
DESCRIPTION_MAX = 128
LABEL_MAX = 32
LABELS_MAX = 10
WEIGHT_CEILING = 1_000_000_000


def _text_within(value: Any, upper: int) -> bool:
    return isinstance(value, str) and 1 <= len(value) <= upper


def valid_signature(signature: Any) -> bool:
    return _text_within(signature, SIGNATURE_MAX)


def valid_description(description: Any) -> bool:
    return _text_within(description, DESCRIPTION_MAX)


def valid_label(label: Any) -> bool:
    return _text_within(label, LABEL_MAX)


def valid_label_collection(labels: Any) -> bool:
    """True iff 1..10 labels, each individually valid."""
    if not isinstance(labels, (list, tuple)):
        return False
    if not 1 <= len(labels) <= LABELS_MAX:
        return False
    return all(valid_label(label) for label in labels)


def valid_weight(weight: Any) -> bool:
    # bool is an int subclass
    if isinstance(weight, bool) or not isinstance(weight, int):
        return False
    return 0 < weight < WEIGHT_CEILING


def first_unit_field_error(
    signature: Any, weight: Any, description: Any, labels: Any
) -> RegistryError | None:
    """Return the error for the first invalid field, or None if all pass.

    Fields are checked in a fixed order: signature, weight, description,
    labels.
    """
    if not valid_signature(signature):
        return InvalidEncoding(f"signature must be 1-{SIGNATURE_MAX} characters")
    if not valid_weight(weight):
        return BoundaryBreach(f"weight must satisfy 0 < weight < {WEIGHT_CEILING}")
    if not valid_description(description):
        return InvalidEncoding(f"description must be 1-{DESCRIPTION_MAX} characters")
    if not valid_label_collection(labels):
        return StructureViolation(
            f"labels must hold 1-{LABELS_MAX} entries of 1-{LABEL_MAX} characters"
        )
    return None


def check_unit_fields(
    signature: Any, weight: Any, description: Any, labels: Any
) -> list[str]:
    """Validate a full set of unit fields.

    Unlike ``first_unit_field_error`` this reports every problem found.
    Returns a list of issues. Empty list means valid.
    """
    issues: list[str] = []

    if not valid_signature(signature):
        issues.append(f"Signature must be 1-{SIGNATURE_MAX} characters")

    if not valid_weight(weight):
        issues.append(f"Weight must be an integer in [1, {WEIGHT_CEILING - 1}]")

    if not valid_description(description):
        issues.append(f"Description must be 1-{DESCRIPTION_MAX} characters")

    if not isinstance(labels, (list, tuple)):
        issues.append("Labels must be a list")
    else:
        if not 1 <= len(labels) <= LABELS_MAX:
            issues.append(f"Expected 1-{LABELS_MAX} labels, got {len(labels)}")
        for i, label in enumerate(labels):
            if not valid_label(label):
                issues.append(f"Label {i + 1} must be 1-{LABEL_MAX} characters")

    return issues
