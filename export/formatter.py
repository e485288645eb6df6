"""
Type-directed cell formatting.

Converts raw record values to typed cells: dates keep their calendar value,
decimals are narrowed to single precision, integers to a fixed bit width,
and text is checked against an overflow threshold.
"""

import logging
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

import numpy as np

from config import export_config
from models import CellValue, ColumnType, FormattedCell, EMPTY_CELL
from .accessors import EMPTY
from .errors import CoercionFault

logger = logging.getLogger(__name__)

# Integral values with more digits than this are not expanded before narrowing
MAX_INTEGER_DIGITS = 4300


class CellFormatter:
    """Formats raw values for one export call."""

    def __init__(self, threshold: int, integer_bits: Optional[int] = None):
        self.threshold = threshold
        self.integer_bits = integer_bits or export_config.integer_bits

    def format(self, raw: Any, column_type: ColumnType) -> FormattedCell:
        """
        Format a raw value as a cell of the declared type.

        Args:
            raw: Value returned by the accessor (EMPTY or None when unresolved)
            column_type: Declared column type

        Returns:
            FormattedCell; overflow is only ever set for text cells
        """
        if raw is EMPTY or raw is None:
            return FormattedCell(EMPTY_CELL)

        try:
            if column_type == ColumnType.DATE:
                return FormattedCell(CellValue.date(to_date(raw)))
            if column_type == ColumnType.DECIMAL:
                return FormattedCell(CellValue.number(narrow_decimal(raw)))
            if column_type == ColumnType.INTEGER:
                return FormattedCell(CellValue.number(narrow_integer(raw, self.integer_bits)))
            return self._format_text(to_text(raw))
        except CoercionFault as e:
            logger.warning(f"Cannot format {type(raw).__name__} as {column_type.value}: {e}")
            return FormattedCell(EMPTY_CELL)

    def _format_text(self, text: str) -> FormattedCell:
        if text == "":
            return FormattedCell(EMPTY_CELL)
        if len(text) > self.threshold:
            logger.debug(f"Text of length {len(text)} exceeds threshold {self.threshold}")
            return FormattedCell(CellValue.text(text), overflow=True)
        return FormattedCell(CellValue.text(text))


def format_value(
    raw: Any,
    column_type: ColumnType,
    threshold: int,
    integer_bits: Optional[int] = None,
) -> FormattedCell:
    """Convenience function to format a single value."""
    return CellFormatter(threshold, integer_bits).format(raw, column_type)


def to_date(raw: Any) -> date:
    """Calendar date of a date, datetime or ISO-8601 string."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise CoercionFault(f"not an ISO date: {raw!r}")
    raise CoercionFault(f"unsupported date value {raw!r}")


def narrow_decimal(raw: Any) -> float:
    """
    Narrow a numeric value to single precision.

    Precision loss is expected, e.g. 0.1 becomes 0.10000000149011612.
    """
    if isinstance(raw, bool):
        raise CoercionFault("booleans are not numbers")
    if isinstance(raw, (int, float, Decimal, np.number)):
        value = raw
    elif isinstance(raw, str):
        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            raise CoercionFault(f"not a number: {raw!r}")
    else:
        raise CoercionFault(f"unsupported decimal value {raw!r}")

    try:
        with np.errstate(over="ignore"):
            narrowed = float(np.float32(float(value)))
    except ValueError:
        raise CoercionFault(f"not a number: {raw!r}")
    except OverflowError:
        raise CoercionFault(f"out of range for a single precision number: {raw!r}")
    if not math.isfinite(narrowed):
        raise CoercionFault(f"out of range for a single precision number: {raw!r}")
    return narrowed


def narrow_integer(raw: Any, bits: int = 32) -> int:
    """
    Narrow an integral value to a two's complement integer of the given width.

    Out of range values keep their low-order bits, e.g. 2**31 becomes -2**31.
    Fractional values are truncated toward zero.
    """
    if isinstance(raw, bool):
        raise CoercionFault("booleans are not numbers")
    if isinstance(raw, (int, np.integer)):
        value = int(raw)
    elif isinstance(raw, Decimal):
        value = _decimal_to_int(raw)
    elif isinstance(raw, (float, np.floating)):
        try:
            value = int(raw)
        except (ValueError, OverflowError):
            raise CoercionFault(f"not a finite number: {raw!r}")
    elif isinstance(raw, str):
        try:
            parsed = Decimal(raw.strip())
        except InvalidOperation:
            raise CoercionFault(f"not an integer: {raw!r}")
        value = _decimal_to_int(parsed)
    else:
        raise CoercionFault(f"unsupported integer value {raw!r}")

    span = 1 << bits
    value &= span - 1
    if value >= span >> 1:
        value -= span
    return value


def _decimal_to_int(value: Decimal) -> int:
    """Truncate a Decimal to an int, refusing non-finite and absurdly large values."""
    if not value.is_finite():
        raise CoercionFault(f"not a finite number: {value!r}")
    if value.adjusted() >= MAX_INTEGER_DIGITS:
        raise CoercionFault(f"more than {MAX_INTEGER_DIGITS} integer digits")
    return int(value)


def to_text(raw: Any) -> str:
    """Text of a scalar value."""
    if isinstance(raw, Enum):
        return str(raw.value)
    if isinstance(raw, str):
        return str(raw)
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, (int, float, Decimal)):
        return str(raw)
    if isinstance(raw, (datetime, date)):
        return raw.isoformat()
    raise CoercionFault(f"unsupported text value of type {type(raw).__name__}")
