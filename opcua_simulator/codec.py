"""
Value codec.

Converts literal strings from a hierarchy definition into typed values.
"""
import struct
from datetime import datetime
from typing import Any, Callable, Dict, Tuple

from .hierarchy.definitions import SemanticType

# Inclusive ranges of the sized integer types
INTEGER_RANGES: Dict[SemanticType, Tuple[int, int]] = {
    SemanticType.SBYTE: (-(2 ** 7), 2 ** 7 - 1),
    SemanticType.BYTE: (0, 2 ** 8 - 1),
    SemanticType.INT16: (-(2 ** 15), 2 ** 15 - 1),
    SemanticType.UINT16: (0, 2 ** 16 - 1),
    SemanticType.INT32: (-(2 ** 31), 2 ** 31 - 1),
    SemanticType.UINT32: (0, 2 ** 32 - 1),
    SemanticType.INT64: (-(2 ** 63), 2 ** 63 - 1),
    SemanticType.UINT64: (0, 2 ** 64 - 1),
}


def parse_bool(literal: str) -> bool:
    """Parse 'true'/'false' in any case, ignoring surrounding whitespace."""
    text = literal.strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"Not a boolean literal: {literal!r}")


def _parse_float(literal: str) -> float:
    # Narrow to single precision; struct raises OverflowError when out of range
    return struct.unpack("<f", struct.pack("<f", float(literal)))[0]


def _parse_datetime(literal: str) -> datetime:
    text = literal.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _sized_integer(data_type: SemanticType) -> Callable[[str], int]:
    low, high = INTEGER_RANGES[data_type]

    def parse(literal: str) -> int:
        value = int(literal)
        if not low <= value <= high:
            raise OverflowError(
                f"{value} is outside the {data_type.value} range [{low}, {high}]"
            )
        return value

    return parse


_CONVERTERS: Dict[SemanticType, Callable[[str], Any]] = {
    SemanticType.BOOLEAN: parse_bool,
    SemanticType.INTEGER: int,
    SemanticType.DOUBLE: float,
    SemanticType.FLOAT: _parse_float,
    SemanticType.DATETIME: _parse_datetime,
    SemanticType.STRING: str,
    **{data_type: _sized_integer(data_type) for data_type in INTEGER_RANGES},
}


def convert(literal: str, data_type: SemanticType) -> Tuple[Any, bool]:
    """
    Convert a literal into a value of the given type.

    Args:
        literal: Text from the hierarchy definition.
        data_type: Declared semantic type.

    Returns:
        Tuple of (value, ok). On a parse failure the value is None and
        ok is False.
    """
    try:
        return _CONVERTERS[data_type](literal), True
    except (ValueError, OverflowError, TypeError):
        return None, False
