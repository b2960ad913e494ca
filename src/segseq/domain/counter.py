"""Counter values bound to an identifier type.

A ``CounterValue`` is the unit passed between the storage protocol and
the optimizers. It wraps a plain Python ``int`` and the identifier type
whose range it must respect. Values are immutable: every arithmetic
operation returns a new instance.

INVARIANT: a CounterValue never holds a number outside its type's range.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from segseq.errors import ConfigurationError, IdentifierOverflowError


class IdentifierType(StrEnum):
    """Integral identifier types a generator can produce."""

    SHORT = "short"
    INTEGER = "integer"
    LONG = "long"
    BIG_INTEGER = "big_integer"

    @property
    def bounds(self) -> tuple[int, int] | None:
        """Inclusive ``(min, max)`` range, or None when unbounded."""
        return _BOUNDS.get(self)


_BOUNDS: dict[IdentifierType, tuple[int, int]] = {
    IdentifierType.SHORT: (-(2**15), 2**15 - 1),
    IdentifierType.INTEGER: (-(2**31), 2**31 - 1),
    IdentifierType.LONG: (-(2**63), 2**63 - 1),
}

_ALIASES: dict[str, IdentifierType] = {
    "short": IdentifierType.SHORT,
    "smallint": IdentifierType.SHORT,
    "int16": IdentifierType.SHORT,
    "int": IdentifierType.INTEGER,
    "integer": IdentifierType.INTEGER,
    "int32": IdentifierType.INTEGER,
    "long": IdentifierType.LONG,
    "bigint": IdentifierType.LONG,
    "int64": IdentifierType.LONG,
    "big_integer": IdentifierType.BIG_INTEGER,
    "biginteger": IdentifierType.BIG_INTEGER,
    "unbounded": IdentifierType.BIG_INTEGER,
}


def resolve_identifier_type(declared: IdentifierType | str | type) -> IdentifierType:
    """Map a declared identifier type onto an :class:`IdentifierType`.

    Accepts an ``IdentifierType``, one of its names or aliases
    (``"int32"``, ``"bigint"``...), or the Python ``int`` type, which maps
    to 64-bit ``long``.

    Raises:
        ConfigurationError: If *declared* has no counter representation.
    """
    if isinstance(declared, IdentifierType):
        return declared
    if declared is int:
        return IdentifierType.LONG
    if isinstance(declared, str):
        resolved = _ALIASES.get(declared.strip().lower())
        if resolved is not None:
            return resolved
    msg = f"Identifier type {declared!r} cannot be mapped to an integral counter"
    raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class CounterValue:
    """An integral counter value carrying its identifier type."""

    value: int
    identifier_type: IdentifierType = IdentifierType.LONG

    def __post_init__(self) -> None:
        bounds = self.identifier_type.bounds
        if bounds is not None and not bounds[0] <= self.value <= bounds[1]:
            msg = (
                f"Counter value {self.value} is out of range for "
                f"{self.identifier_type.value} identifiers {bounds}"
            )
            raise IdentifierOverflowError(msg)

    # --- construction ---

    @classmethod
    def initialize(cls, identifier_type: IdentifierType, scalar: int) -> CounterValue:
        return cls(int(scalar), identifier_type)

    @classmethod
    def from_stored(
        cls,
        identifier_type: IdentifierType,
        stored: int | None,
        default: int,
    ) -> CounterValue:
        """Initialize from a stored column value, using *default* for NULL."""
        return cls(default if stored is None else int(stored), identifier_type)

    # --- arithmetic ---

    def increment(self) -> CounterValue:
        return self.add(1)

    def add(self, amount: int) -> CounterValue:
        return CounterValue(self.value + amount, self.identifier_type)

    def subtract(self, amount: int) -> CounterValue:
        return CounterValue(self.value - amount, self.identifier_type)

    def multiply(self, factor: int) -> CounterValue:
        return CounterValue(self.value * factor, self.identifier_type)

    def copy(self) -> CounterValue:
        return CounterValue(self.value, self.identifier_type)

    # --- conversion ---

    def to_parameter(self) -> int:
        """Value suitable for binding as a statement parameter."""
        return self.value

    def __int__(self) -> int:
        return self.value

    # --- ordering (against other counters or plain ints) ---

    def __lt__(self, other: CounterValue | int) -> bool:
        return self.value < int(other)

    def __le__(self, other: CounterValue | int) -> bool:
        return self.value <= int(other)

    def __gt__(self, other: CounterValue | int) -> bool:
        return self.value > int(other)

    def __ge__(self, other: CounterValue | int) -> bool:
        return self.value >= int(other)
