"""
Expression Evaluator for filter queries.

Evaluates a postfix expression against the truth value of each symbol.
"""

from __future__ import annotations

from typing import List, Mapping

from ..errors import EvaluationError
from .parser import AND, BINARY_OPS, NOT, OR, PostfixExpression, Symbol, is_symbol


class PostfixEvaluator:
    """
    Stack evaluator for postfix (RPN) boolean expressions.

    A symbol pushes its truth value, NOT negates the top of the stack,
    AND/OR combine the top two values. Exactly one value must be left.
    """

    def evaluate(
        self,
        postfix: PostfixExpression,
        truth: Mapping[Symbol, bool]
    ) -> bool:
        """
        Evaluate a postfix expression.

        Args:
            postfix: The compiled postfix expression.
            truth: Truth value for every symbol the expression references.

        Returns:
            The value of the expression.

        Raises:
            EvaluationError: If the postfix form is malformed.
        """
        stack: List[bool] = []

        for token in postfix.tokens:
            if is_symbol(token):
                try:
                    stack.append(truth[token])
                except KeyError:
                    raise EvaluationError(
                        f"No truth value for symbol {token}", postfix.tokens
                    ) from None
            elif token == NOT:
                if not stack:
                    raise EvaluationError("Missing operand for NOT", postfix.tokens)
                stack.append(not stack.pop())
            elif token in BINARY_OPS:
                if len(stack) < 2:
                    raise EvaluationError(
                        f"Missing operand for {token}", postfix.tokens
                    )
                right = stack.pop()
                left = stack.pop()
                if token == AND:
                    stack.append(left and right)
                else:
                    stack.append(left or right)
            else:
                raise EvaluationError(f"Unexpected token {token!r}", postfix.tokens)

        if len(stack) != 1:
            raise EvaluationError(
                f"Expected one result, {len(stack)} left on the stack",
                postfix.tokens,
            )
        return stack[0]

    def check(self, postfix: PostfixExpression) -> None:
        """
        Check operator arity without evaluating.

        Raises:
            EvaluationError: If evaluation would underflow or leave more
                or fewer than one value.
        """
        depth = 0
        for token in postfix.tokens:
            if is_symbol(token):
                depth += 1
            elif token == NOT:
                if depth < 1:
                    raise EvaluationError("Missing operand for NOT", postfix.tokens)
            elif token in (AND, OR):
                if depth < 2:
                    raise EvaluationError(
                        f"Missing operand for {token}", postfix.tokens
                    )
                depth -= 1
            else:
                raise EvaluationError(f"Unexpected token {token!r}", postfix.tokens)

        if depth != 1:
            raise EvaluationError(
                f"Expected one result, {depth} left on the stack",
                postfix.tokens,
            )
