"""OpenAir text format: parsing, validation and conversion to records.

Typical usage:
    from airspacekit.openair import convert_to_api_format, parse_openair_file

    records = convert_to_api_format(parse_openair_file(text, "US"), "US")
"""

from airspacekit.openair.converter import (
    build_geometry,
    convert_to_api_format,
    parse_altitude,
    parse_altitude_band,
)
from airspacekit.openair.parser import (
    CLASS_LABELS,
    OpenAirAirspace,
    OpenAirParser,
    class_label,
    parse_openair_file,
)
from airspacekit.openair.validator import ValidationResult, validate_openair_file

__all__ = [
    "CLASS_LABELS",
    "OpenAirAirspace",
    "OpenAirParser",
    "ValidationResult",
    "build_geometry",
    "class_label",
    "convert_to_api_format",
    "parse_altitude",
    "parse_altitude_band",
    "parse_openair_file",
    "validate_openair_file",
]
