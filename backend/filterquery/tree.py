"""
Filter query expression trees.

An ExpressionTree compiles a boolean combination of predicates once and
then matches it against any number of events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .config import FilterSettings
from .errors import EvaluationError, ParsingError
from .events import TraceEvent
from .logic import (
    ExpressionPrimer,
    PostfixEvaluator,
    PostfixExpression,
    ShuntingYardConverter,
)
from .logic.parser import Symbol
from .predicate import FilterQueryPredicate, Predicate, PredicateType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimpleExpression:
    """A single predicate matched directly, without postfix evaluation."""
    predicate: Predicate


@dataclass(frozen=True)
class CompiledExpression:
    """Symbol map plus postfix form of a compound expression."""
    symbol_map: Mapping[Symbol, Predicate]
    postfix: PostfixExpression


Compiled = Union[SimpleExpression, CompiledExpression]


def is_simple_expression(expression: str, predicate_type: PredicateType) -> bool:
    """
    Return True if the expression can skip priming and conversion.

    The expression has to be one valid predicate and either contain no
    opening parenthesis or contain a closing one.
    """
    return predicate_type.is_valid(expression) and (
        "(" not in expression or ")" in expression
    )


class ExpressionTree:
    """
    A compiled filter query expression.

    Example:
        >>> tree = ExpressionTree("Level==Error && !Source==Net")
        >>> tree.match(TraceEvent("Log", {"Level": "Error", "Source": "Disk"}))
        True

    Each match call builds its own truth map, so a tree can be shared by
    several threads as long as its predicates are side-effect free.
    """

    def __init__(
        self,
        expression: str,
        settings: Optional[FilterSettings] = None,
        predicate_type: Optional[PredicateType] = None,
    ):
        """
        Compile an expression.

        Args:
            expression: The filter expression, e.g. ``A && (B || !C)``.
            settings: Compilation settings.
            predicate_type: Atomic predicate implementation to use.

        Raises:
            ParsingError: If the expression is empty or malformed.
        """
        if expression is not None and not isinstance(expression, str):
            raise ParsingError(
                f"Expected string expression, got {type(expression).__name__}",
                None,
            )
        if not expression:
            raise ParsingError("Expression is empty", expression)

        self.original_expression = expression
        self.settings = settings if settings is not None else FilterSettings()
        self.predicate_type = predicate_type or FilterQueryPredicate
        self._evaluator = PostfixEvaluator()
        self.compiled: Compiled = self._compile(expression)

    def _compile(self, expression: str) -> Compiled:
        if is_simple_expression(expression, self.predicate_type):
            logger.debug("Compiled %r as a single predicate", expression)
            return SimpleExpression(self.predicate_type.build(expression))

        primer = ExpressionPrimer(
            self.predicate_type,
            max_predicates=self.settings.max_predicates,
            keyword_operators=self.settings.keyword_operators,
        )
        try:
            primed = primer.prime(expression)
            postfix = ShuntingYardConverter().convert(primed)
        except ParsingError as e:
            logger.debug("Failed to compile %r: %s", expression, e)
            raise

        try:
            self._evaluator.check(postfix)
        except EvaluationError as e:
            logger.debug("Failed to compile %r: %s", expression, e)
            raise ParsingError(e.reason, expression) from e

        logger.debug(
            "Compiled %r to postfix %r over %d predicate(s)",
            expression, postfix.text, len(primed.symbol_map),
        )
        return CompiledExpression(symbol_map=primed.symbol_map, postfix=postfix)

    @property
    def is_simple(self) -> bool:
        return isinstance(self.compiled, SimpleExpression)

    def match(self, event: TraceEvent) -> bool:
        """Return True if the event satisfies the expression."""
        compiled = self.compiled
        if isinstance(compiled, SimpleExpression):
            return compiled.predicate.match(event)

        return self._evaluate(compiled, event.properties(), event.event_name)

    def match_properties(self, properties: Mapping[str, Any], event_name: str) -> bool:
        """Return True if a property map plus event name satisfies the expression."""
        compiled = self.compiled
        if isinstance(compiled, SimpleExpression):
            return compiled.predicate.match_properties(properties, event_name)

        return self._evaluate(compiled, properties, event_name)

    def _evaluate(
        self,
        compiled: CompiledExpression,
        properties: Mapping[str, Any],
        event_name: str,
    ) -> bool:
        truth: Dict[Symbol, bool] = {
            symbol: predicate.match_properties(properties, event_name)
            for symbol, predicate in compiled.symbol_map.items()
        }
        return self._evaluator.evaluate(compiled.postfix, truth)

    def __repr__(self) -> str:
        return f"ExpressionTree({self.original_expression!r})"


def build(
    expression: str,
    settings: Optional[FilterSettings] = None,
    predicate_type: Optional[PredicateType] = None,
) -> ExpressionTree:
    """Compile an expression into an ExpressionTree."""
    return ExpressionTree(expression, settings=settings, predicate_type=predicate_type)
