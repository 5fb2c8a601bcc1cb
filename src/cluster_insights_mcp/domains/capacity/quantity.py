"""Kubernetes resource quantity parsing and formatting.

CPU quantities normalize to integer millicores and memory quantities to
integer bytes. All capacity arithmetic happens on these integers; the
conversions to cores and GB at the bottom of this module are used only
when rendering results.

Accepted forms:
- CPU: "500m" (millicores), "2" or "0.5" (cores)
- Memory: "128Mi" (binary suffix), "1G" (decimal suffix), "1048576" (bytes)

Numbers are parsed exactly with Decimal. A value that is not a whole number
of base units after scaling is rounded up, as the Kubernetes API does.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal
from enum import Enum

from cluster_insights_mcp.utils.errors import InvalidParameterError, MalformedQuantityError

MILLICORES_PER_CORE = 1000
BYTES_PER_MB = 1024**2
# Display GB is binary: 32Gi of allocatable memory reads as 32.0 GB.
BYTES_PER_GB = 1024**3

# Ordered largest first so formatting picks the biggest exact suffix.
_BINARY_SUFFIXES: tuple[tuple[str, int], ...] = (
    ("Ei", 1024**6),
    ("Pi", 1024**5),
    ("Ti", 1024**4),
    ("Gi", 1024**3),
    ("Mi", 1024**2),
    ("Ki", 1024),
)
_DECIMAL_SUFFIXES: tuple[tuple[str, int], ...] = (
    ("E", 1000**6),
    ("P", 1000**5),
    ("T", 1000**4),
    ("G", 1000**3),
    ("M", 1000**2),
    ("k", 1000),
)
_BINARY_MULTIPLIERS = dict(_BINARY_SUFFIXES)
# "K" is accepted alongside the canonical "k"
_DECIMAL_MULTIPLIERS = {**dict(_DECIMAL_SUFFIXES), "K": 1000}

_QUANTITY_PATTERN = re.compile(r"^(?P<number>[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?P<suffix>[A-Za-z]*)$")


class QuantityForm(str, Enum):
    """How a quantity string expressed its value."""

    MILLICORE = "millicore"
    CORE = "core"
    BYTE = "byte"
    MILLIBYTE = "millibyte"
    BINARY_SUFFIX = "binary-suffix"
    DECIMAL_SUFFIX = "decimal-suffix"


@dataclass(frozen=True)
class ParsedQuantity:
    """A quantity resolved to its base unit, tagged with its source form."""

    value: int
    form: QuantityForm
    suffix: str = ""


def _split(raw: str, field: str) -> tuple[Decimal, str]:
    """Split a quantity string into its number and suffix."""
    if not isinstance(raw, str):
        raise MalformedQuantityError(field, raw, "expected a quantity string")

    text = raw.strip()
    if not text:
        raise MalformedQuantityError(field, raw, "empty quantity")
    if text.startswith("-"):
        raise MalformedQuantityError(field, raw, "negative quantities are not allowed")

    match = _QUANTITY_PATTERN.match(text)
    if match is None:
        raise MalformedQuantityError(field, raw, "not a numeric quantity")

    return Decimal(match.group("number")), match.group("suffix")


def _to_base_units(number: Decimal, multiplier: int) -> int:
    """Scale a decimal number and round up to a whole base unit."""
    return int((number * multiplier).to_integral_value(rounding=ROUND_CEILING))


def parse_cpu_quantity(raw: str, field: str = "cpu") -> ParsedQuantity:
    """Parse a CPU quantity into millicores.

    Args:
        raw: Quantity string such as "250m", "2" or "0.5".
        field: Name of the field being parsed, used in error messages.

    Returns:
        The parsed quantity in millicores.

    Raises:
        MalformedQuantityError: If the string is negative, has an unknown
            suffix or is not numeric.
    """
    number, suffix = _split(raw, field)
    if suffix == "m":
        return ParsedQuantity(_to_base_units(number, 1), QuantityForm.MILLICORE, suffix)
    if suffix == "":
        return ParsedQuantity(_to_base_units(number, MILLICORES_PER_CORE), QuantityForm.CORE)
    raise MalformedQuantityError(field, raw, f"unknown CPU suffix '{suffix}'")


def parse_memory_quantity(raw: str, field: str = "memory") -> ParsedQuantity:
    """Parse a memory quantity into bytes.

    Args:
        raw: Quantity string such as "512Mi", "1G", "1048576" or
            "1288490188800m".
        field: Name of the field being parsed, used in error messages.

    Returns:
        The parsed quantity in bytes.

    Raises:
        MalformedQuantityError: If the string is negative, has an unknown
            suffix or is not numeric.
    """
    number, suffix = _split(raw, field)
    if suffix == "":
        return ParsedQuantity(_to_base_units(number, 1), QuantityForm.BYTE)
    if suffix == "m":
        # the apiserver canonicalises fractional byte counts to millibytes
        value = int(number.scaleb(-3).to_integral_value(rounding=ROUND_CEILING))
        return ParsedQuantity(value, QuantityForm.MILLIBYTE, suffix)
    if suffix in _BINARY_MULTIPLIERS:
        value = _to_base_units(number, _BINARY_MULTIPLIERS[suffix])
        return ParsedQuantity(value, QuantityForm.BINARY_SUFFIX, suffix)
    if suffix in _DECIMAL_MULTIPLIERS:
        value = _to_base_units(number, _DECIMAL_MULTIPLIERS[suffix])
        return ParsedQuantity(value, QuantityForm.DECIMAL_SUFFIX, suffix)
    raise MalformedQuantityError(field, raw, f"unknown memory suffix '{suffix}'")


def parse_cpu(raw: str, field: str = "cpu") -> int:
    """Parse a CPU quantity string to millicores."""
    return parse_cpu_quantity(raw, field).value


def parse_memory(raw: str, field: str = "memory") -> int:
    """Parse a memory quantity string to bytes."""
    return parse_memory_quantity(raw, field).value


def format_cpu(millicores: int) -> str:
    """Format millicores as a canonical CPU quantity ("2", "1500m")."""
    if millicores < 0:
        raise ValueError(f"CPU quantity cannot be negative: {millicores}")
    if millicores % MILLICORES_PER_CORE == 0:
        return str(millicores // MILLICORES_PER_CORE)
    return f"{millicores}m"


def format_memory(num_bytes: int) -> str:
    """Format bytes as a canonical memory quantity ("4Gi", "1500k", "123")."""
    if num_bytes < 0:
        raise ValueError(f"Memory quantity cannot be negative: {num_bytes}")
    if num_bytes == 0:
        return "0"
    for suffix, multiplier in _BINARY_SUFFIXES + _DECIMAL_SUFFIXES:
        if num_bytes % multiplier == 0:
            return f"{num_bytes // multiplier}{suffix}"
    return str(num_bytes)


def millicores_to_cores(millicores: int) -> float:
    """Convert millicores to cores for display."""
    return millicores / MILLICORES_PER_CORE


def bytes_to_gb(num_bytes: int) -> float:
    """Convert bytes to binary GB for display."""
    return num_bytes / BYTES_PER_GB


def bytes_to_mb(num_bytes: int) -> int:
    """Convert bytes to whole binary MB for display."""
    return num_bytes // BYTES_PER_MB


def _human_to_base_units(value: float | int, multiplier: int, parameter: str) -> int:
    """Convert a caller-supplied amount into base units, rejecting bad input."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParameterError(parameter, value, "must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidParameterError(parameter, value, "must be a finite number")
    if value < 0:
        raise InvalidParameterError(parameter, value, "must be non-negative")
    return _to_base_units(Decimal(str(value)), multiplier)


def cores_to_millicores(cores: float | int, parameter: str = "cpu_cores") -> int:
    """Convert a requested number of cores to millicores, rounding up."""
    return _human_to_base_units(cores, MILLICORES_PER_CORE, parameter)


def gb_to_bytes(gb: float | int, parameter: str = "memory_gb") -> int:
    """Convert a requested amount of binary GB to bytes, rounding up."""
    return _human_to_base_units(gb, BYTES_PER_GB, parameter)
