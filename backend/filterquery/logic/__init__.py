"""
Logic engine for filter queries.

Provides expression priming, postfix conversion and postfix evaluation.
"""

from .parser import (
    ExpressionPrimer,
    PostfixExpression,
    PrimedExpression,
    ShuntingYardConverter,
)
from .evaluator import PostfixEvaluator

__all__ = [
    "ExpressionPrimer",
    "PostfixExpression",
    "PrimedExpression",
    "ShuntingYardConverter",
    "PostfixEvaluator",
]
