"""
Atomic filter predicates.

A predicate is one indivisible condition such as ``Level==Error`` or
``EventName != GC/Start``. The expression tree only relies on the
``PredicateType`` contract, so any class providing ``is_valid``/``build``
and the two match methods can be plugged in; ``FilterQueryPredicate`` is
the implementation used by default.
"""

from __future__ import annotations

import math
import operator
import re
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from .errors import ParsingError
from .events import TraceEvent


class Predicate(Protocol):
    """A compiled atomic condition."""

    def match(self, event: TraceEvent) -> bool:
        ...

    def match_properties(self, properties: Mapping[str, Any], event_name: str) -> bool:
        ...


class PredicateType(Protocol):
    """Factory side of the predicate contract.

    A type may also provide ``scan(text, start)`` returning the end of the
    longest valid predicate starting at ``start`` (or None). Without it the
    primer tries every end offset with ``is_valid``, which is quadratic in
    the length of the expression.
    """

    def is_valid(self, text: str) -> bool:
        ...

    def build(self, text: str) -> Predicate:
        ...


EVENT_NAME_PROPERTY = "EventName"

_PREDICATE_RE = re.compile(
    r"(?P<name>[A-Za-z_][A-Za-z0-9_.:\-]*)"
    r"\s*(?P<op>==|!=|>=|<=|>|<)\s*"
    r"(?P<value>\"[^\"]*\"|[^\s()&|\"]+)"
)

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}


_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _to_number(value: Any) -> Optional[float]:
    """Parse a finite decimal number; NaN, infinities and "1_000" stay text."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and _NUMBER_RE.fullmatch(value.strip()):
        number = float(value)
    else:
        return None
    return number if math.isfinite(number) else None


class FilterQueryPredicate:
    """
    A ``<Property> <Op> <Value>`` comparison.

    Numbers compare numerically when both sides parse as numbers, anything
    else compares as case-insensitive text. ``EventName`` compares against
    the event name. A property missing from the event never matches.
    """

    def __init__(self, expression: str):
        m = _PREDICATE_RE.fullmatch(expression or "")
        if m is None:
            raise ParsingError("Not a single filter predicate", expression)

        self.expression = expression
        self.property_name = m.group("name")
        self.op = m.group("op")
        value = m.group("value")
        if value.startswith('"'):
            value = value[1:-1]
        self.value = value
        self._compare = _OPERATORS[self.op]
        self._number = _to_number(value)
        self._folded = value.casefold()

    @classmethod
    def is_valid(cls, text: str) -> bool:
        """Return True if ``text`` is exactly one predicate."""
        return bool(text) and _PREDICATE_RE.fullmatch(text) is not None

    @classmethod
    def scan(cls, text: str, start: int) -> Optional[int]:
        """Return the end of the longest predicate starting at ``start``."""
        m = _PREDICATE_RE.match(text, start)
        return m.end() if m else None

    @classmethod
    def build(cls, text: str) -> "FilterQueryPredicate":
        return cls(text)

    def match(self, event: TraceEvent) -> bool:
        return self.match_properties(event.properties(), event.event_name)

    def match_properties(self, properties: Mapping[str, Any], event_name: str) -> bool:
        if self.property_name == EVENT_NAME_PROPERTY:
            actual = event_name
        else:
            actual = self._lookup(properties)
        if actual is None:
            return False

        if self._number is not None:
            number = _to_number(actual)
            if number is not None:
                return self._compare(number, self._number)

        return self._compare(str(actual).casefold(), self._folded)

    def _lookup(self, properties: Mapping[str, Any]) -> Any:
        if self.property_name in properties:
            return properties[self.property_name]
        # Fall back to a case-insensitive name lookup
        wanted = self.property_name.casefold()
        for name, value in properties.items():
            if name.casefold() == wanted:
                return value
        return None

    def __repr__(self) -> str:
        return f"FilterQueryPredicate({self.expression!r})"
