"""Coercion of string-or-number JSON scalars into strict numeric types.

Alpha Vantage encodes the same logical field as a JSON string in one
response and a JSON number in the next. These two functions are the only
place that variance is absorbed; everything downstream sees ``float`` or
``int``.
"""

from __future__ import annotations

import math
import re
from typing import Any

from pricefeed.core.exceptions import MalformedNumber

_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INT_RE = re.compile(r"[+-]?[0-9]+")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def coerce_float(value: Any) -> float:
    """Coerce a price field to a finite float.

    Accepts a JSON number (int or float) or a string holding a plain decimal
    literal such as ``"190.12"`` or ``"1.5e2"``. Whitespace, underscores,
    ``inf`` and ``nan`` are rejected.

    Raises
    ------
    MalformedNumber
        For any other shape, or a value that is not a finite float.
    """
    if isinstance(value, bool):
        raise _malformed(value, "float")

    if isinstance(value, str):
        if not _FLOAT_RE.fullmatch(value):
            raise _malformed(value, "float")
        result = float(value)
    elif isinstance(value, (int, float)):
        try:
            result = float(value)
        except OverflowError:
            raise _malformed(value, "float") from None
    else:
        raise _malformed(value, "float")

    if not math.isfinite(result):
        raise _malformed(value, "float")
    return result


def coerce_int(value: Any) -> int:
    """Coerce a volume field to an int64-range integer.

    Accepts a JSON integer or a string of optionally signed digits. Floats
    are rejected even when integral, so ``1000.0`` never becomes ``1000``.

    Raises
    ------
    MalformedNumber
        For any other shape, or a value outside the int64 range.
    """
    if isinstance(value, bool):
        raise _malformed(value, "int")

    if isinstance(value, str):
        if not _INT_RE.fullmatch(value):
            raise _malformed(value, "int")
        try:
            result = int(value)
        except ValueError:
            # exceeds the interpreter's int string-conversion digit limit
            raise _malformed(value, "int") from None
    elif isinstance(value, int):
        result = value
    else:
        raise _malformed(value, "int")

    if not INT64_MIN <= result <= INT64_MAX:
        raise _malformed(value, "int")
    return result


def _malformed(value: Any, target: str) -> MalformedNumber:
    return MalformedNumber(
        f"Cannot coerce {value!r} to {target}",
        context={"value": value, "target": target},
    )
