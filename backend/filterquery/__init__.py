"""
Filter Query: compile-once boolean filters over trace events.

This package compiles expressions such as ``Level==Error && !Source==Net``
into a postfix form once, then evaluates them against each incoming event.
"""

from .config import FilterSettings, load_settings
from .errors import EvaluationError, FilterQueryError, ParsingError
from .events import TraceEvent
from .filterset import FilterSet
from .predicate import FilterQueryPredicate, Predicate, PredicateType
from .tree import (
    CompiledExpression,
    ExpressionTree,
    SimpleExpression,
    build,
    is_simple_expression,
)

__version__ = "1.0.0"
__all__ = [
    "FilterSettings",
    "load_settings",
    "EvaluationError",
    "FilterQueryError",
    "ParsingError",
    "TraceEvent",
    "FilterSet",
    "FilterQueryPredicate",
    "Predicate",
    "PredicateType",
    "CompiledExpression",
    "ExpressionTree",
    "SimpleExpression",
    "build",
    "is_simple_expression",
]
