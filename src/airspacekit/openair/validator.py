"""Structural validation of OpenAir files.

This is a lint pass for user-supplied files, separate from the best-effort
parser: it reports missing markers as errors and suspicious records as
warnings, without rejecting anything the parser would accept.

Typical usage:
    from airspacekit.openair.validator import validate_openair_file

    result = validate_openair_file(text)
    if not result.is_valid:
        print("\\n".join(result.errors))
"""

import logging
from dataclasses import dataclass, field

from airspacekit.geometry.validation import has_self_intersection
from airspacekit.openair.parser import OpenAirParser

logger = logging.getLogger(__name__)

_MARKER_PREFIXES = ("AC ", "AN ", "DP ", "V X=")
_GEOMETRY_PREFIXES = ("DP ", "V X=", "DC ")


@dataclass
class ValidationResult:
    """Outcome of validating an OpenAir file.

    Attributes:
        is_valid: True when no errors were found.
        errors: Problems that make the file unusable.
        warnings: Problems with individual records.
        airspace_count: Number of ``AC`` records seen.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    airspace_count: int = 0


def validate_openair_file(text: str) -> ValidationResult:
    """Check an OpenAir document for basic structural problems.

    Args:
        text: Document text.

    Returns:
        Validation result listing errors and warnings.

    Examples:
        >>> validate_openair_file("").errors[0]
        'File is empty'
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(text, str) or not text.strip():
        return ValidationResult(
            is_valid=False,
            errors=["File is empty", "No airspace definitions found (AC entries missing)"],
        )

    lines = [line.strip() for line in text.splitlines()]
    airspace_count = 0
    in_airspace = False
    has_geometry = False

    for line in lines:
        if line.startswith("AC "):
            if in_airspace and not has_geometry:
                warnings.append(f"Airspace {airspace_count} has no coordinates")
            airspace_count += 1
            in_airspace = True
            has_geometry = False
        elif line.startswith(_GEOMETRY_PREFIXES):
            has_geometry = True

    if in_airspace and not has_geometry:
        warnings.append(f"Airspace {airspace_count} has no coordinates")

    if airspace_count == 0:
        errors.append("No airspace definitions found (AC entries missing)")
        errors.append("No valid airspace entries found")

    if not any(line.startswith(_MARKER_PREFIXES) for line in lines):
        errors.append("File does not appear to be in OpenAir format")

    if not errors:
        for airspace in OpenAirParser().parse(text):
            if airspace.polygon and has_self_intersection(airspace.polygon):
                warnings.append(f"Airspace '{airspace.name}' boundary intersects itself")

    result = ValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        airspace_count=airspace_count,
    )
    logger.debug(
        "Validated OpenAir file: %d airspaces, %d errors, %d warnings",
        airspace_count,
        len(errors),
        len(warnings),
    )
    return result
