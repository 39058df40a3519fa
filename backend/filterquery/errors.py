"""
Exceptions raised while compiling or evaluating filter query expressions.
"""

from __future__ import annotations

from typing import Optional, Sequence


class FilterQueryError(ValueError):
    """Base class for all filter query errors."""


class ParsingError(FilterQueryError):
    """
    Raised when an expression cannot be compiled.

    Covers empty input, unrecognised tokens, unbalanced parentheses,
    operators missing operands and too many distinct predicates.
    """

    def __init__(
        self,
        message: str,
        expression: Optional[str],
        position: Optional[int] = None,
    ):
        self.reason = message
        self.expression = expression
        self.position = position
        detail = f"{message} in expression {expression!r}"
        if position is not None:
            detail += f" at position {position}"
        super().__init__(detail)


class EvaluationError(FilterQueryError):
    """Raised when a postfix expression is malformed at evaluation time."""

    def __init__(self, message: str, postfix: Sequence = ()):
        self.reason = message
        self.postfix = tuple(postfix)
        super().__init__(f"{message} (postfix: {' '.join(str(t) for t in self.postfix)})")
