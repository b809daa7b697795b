"""Maps scalar JSON values to Avro primitive types."""

from decimal import Decimal
from typing import Any

from avroderive.constants import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN
from avroderive.errors import Conflict, RangeError
from avroderive.type_nodes import (BOOLEAN, DOUBLE, INT, LONG, NULL, STRING,
                                   DerivationMode, PrimitiveType)


def classify(value: Any, mode: DerivationMode) -> PrimitiveType | Conflict:
    """Classifies one scalar JSON value.

    Integers are sized to the narrowest of int/long. An integer outside the
    64-bit range is a RangeError in strict mode and a double in lenient mode.

    Args:
        value: A scalar produced by the JSON parser
        mode: Strict or lenient derivation

    Returns:
        The primitive type, or a Conflict for an out-of-range integer
    """
    if value is None:
        return NULL
    # bool is a subclass of int and must be tested first
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, str):
        return STRING
    if isinstance(value, int):
        if INT32_MIN <= value <= INT32_MAX:
            return INT
        if INT64_MIN <= value <= INT64_MAX:
            return LONG
        if mode == DerivationMode.LENIENT:
            return DOUBLE
        return Conflict(RangeError(f"Integer {value} exceeds the range of long"))
    if isinstance(value, (float, Decimal)):
        return DOUBLE
    raise TypeError(f"Not a scalar JSON value: {type(value).__name__}")
