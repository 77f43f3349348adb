"""
Machine value protocol.

Values threaded through a run are never mutated in place. Host values are
normalized once by ``freeze`` into read-only equivalents, so every callable
receives a view it cannot use to change state shared with other steps or
other concurrent runs. Callables change the value only by returning a new one.
"""

import datetime
import math
from decimal import Decimal
from fractions import Fraction
from typing import Any, Iterator, Mapping

from scriptfsm.errors import ValueConversionError

_SCALAR_TYPES = (
    type(None),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    Decimal,
    Fraction,
    datetime.date,
    datetime.time,
    datetime.timedelta,
)


class ErrorValue:
    """Marker returned by a callable to abort the run with a domain error.

    Scripts build it with the injected ``error(message)`` helper.
    """

    __slots__ = ("message",)

    def __init__(self, message: Any = ""):
        self.message = str(message)

    def __repr__(self) -> str:
        return f"error({self.message!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ErrorValue) and other.message == self.message

    def __hash__(self) -> int:
        return hash(("ErrorValue", self.message))

    def __bool__(self) -> bool:
        return False


def error(message: Any = "") -> ErrorValue:
    """Build a domain error marker."""
    return ErrorValue(message)


class FrozenDict(Mapping):
    """Read-only mapping used as the frozen form of dicts."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping = ()):
        self._data = dict(data)

    def __getitem__(self, key: Any) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FrozenDict({self._data!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FrozenDict):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._data.items()))

    def thaw(self) -> dict:
        return thaw(self)


def freeze(value: Any) -> Any:
    """Normalize a host value into its immutable machine form.

    Raises:
        ValueConversionError: If the value (or anything nested in it)
            has no machine representation, or is self-referential.
    """
    return _freeze(value, set())


def _freeze(value: Any, active: set) -> Any:
    if isinstance(value, (_SCALAR_TYPES, ErrorValue)):
        return value
    if isinstance(value, bytearray):
        return bytes(value)
    if isinstance(value, (list, tuple, set, frozenset, Mapping)):
        marker = id(value)
        if marker in active:
            raise ValueConversionError(value, "self-referential value")
        active.add(marker)
        try:
            if isinstance(value, Mapping):
                return FrozenDict(
                    (_freeze(k, active), _freeze(v, active))
                    for k, v in value.items()
                )
            if isinstance(value, (set, frozenset)):
                return frozenset(_freeze(v, active) for v in value)
            return tuple(_freeze(v, active) for v in value)
        except TypeError as e:
            # unhashable frozen key or set member
            raise ValueConversionError(value, str(e)) from e
        finally:
            active.discard(marker)
    raise ValueConversionError(value, "unsupported type")


def thaw(value: Any) -> Any:
    """Convert a frozen value back into plain mutable host containers."""
    if isinstance(value, FrozenDict):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    if isinstance(value, frozenset):
        # members must stay hashable
        return set(value)
    return value


def is_truthy(value: Any) -> bool:
    """Truthiness applied to condition results. NaN is falsy."""
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)
