"""
Runtime values for the scenelang evaluator.

Every evaluation produces a Value. Language errors are values too: an
Error value wraps the Diagnostic that describes it and is passed back up
the tree unchanged by every construct that sees it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from ..errors import Diagnostic

Number = Union[int, float]

# Ints are signed 64-bit
INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1


class ValueType(Enum):
    NULL = "Null"
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    ATTRIBUTE = "Attribute"
    ERROR = "Error"


@dataclass(frozen=True)
class Value:
    """
    A runtime value tagged with its scenelang type.

    The `data` field holds the Python object (int, float, bool, None, or a
    Diagnostic for errors). Attribute values also carry their `key`.
    """
    type: ValueType
    data: Any = None
    key: Optional[str] = None

    def __repr__(self) -> str:
        if self.type == ValueType.ATTRIBUTE:
            return f"Value({self.type.value}, {self.key}={self.data!r})"
        return f"Value({self.type.value}, {self.data!r})"

    @property
    def is_error(self) -> bool:
        return self.type == ValueType.ERROR

    @property
    def is_numeric(self) -> bool:
        return self.type in (ValueType.INT, ValueType.FLOAT)

    @property
    def error(self) -> Diagnostic:
        """The diagnostic carried by an Error value."""
        if self.type != ValueType.ERROR:
            raise AttributeError(f"{self.type.value} value carries no error")
        return self.data

    def to_json(self) -> dict:
        """Convert to the externally visible `log` object."""
        if self.type == ValueType.ERROR:
            return {"type": self.type.value, "value": self.data.to_json()}
        if self.type == ValueType.ATTRIBUTE:
            return {"type": self.type.value, "key": self.key, "value": self.data}
        return {"type": self.type.value, "value": self.data}


NULL = Value(ValueType.NULL)
TRUE = Value(ValueType.BOOLEAN, True)
FALSE = Value(ValueType.BOOLEAN, False)


# Convenience constructors

def null_val() -> Value:
    return NULL


def int_val(n: int) -> Value:
    """
    Create an integer value.

    Raises OverflowError when n does not fit in a signed 64-bit integer.
    """
    n = int(n)
    if not INT_MIN <= n <= INT_MAX:
        raise OverflowError("value does not fit in a 64-bit Int")
    return Value(ValueType.INT, n)


def float_val(x: float) -> Value:
    """Create a float value."""
    return Value(ValueType.FLOAT, float(x))


def bool_val(b: bool) -> Value:
    """Create a boolean value."""
    return TRUE if b else FALSE


def attribute_val(key: str, n: Number) -> Value:
    """Create an attribute value; the number keeps its int/float kind."""
    return Value(ValueType.ATTRIBUTE, n, key)


def error_val(diagnostic: Diagnostic) -> Value:
    """Wrap a diagnostic as an Error value."""
    return Value(ValueType.ERROR, diagnostic)
