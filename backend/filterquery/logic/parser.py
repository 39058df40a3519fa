"""
Expression Parser for filter queries.

Primes a raw filter expression (each atomic predicate replaced by an
integer symbol) and converts the primed infix form into postfix order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from ..errors import ParsingError
from ..predicate import Predicate, PredicateType

logger = logging.getLogger(__name__)

# Canonical operator tokens
NOT = "!"
AND = "&&"
OR = "||"
LPAREN = "("
RPAREN = ")"

Symbol = int
Token = Union[Symbol, str]

# Binding strength, higher binds tighter
PRECEDENCE = {
    NOT: 3,
    AND: 2,
    OR: 1,
}

RIGHT_ASSOCIATIVE = {NOT}

BINARY_OPS = {AND, OR}

SYMBOLIC_OPS = {
    "&&": AND,
    "||": OR,
    "!": NOT,
}

KEYWORD_OPS = {
    "AND": AND,
    "OR": OR,
    "NOT": NOT,
}

_KEYWORD_RE = re.compile(r"(AND|OR|NOT)(?=[\s(!]|$)", re.IGNORECASE)


def is_symbol(token: Token) -> bool:
    return isinstance(token, int)


def _describe(token: Token) -> str:
    if is_symbol(token):
        return f"predicate {token}"
    return f"'{token}'"


def render(tokens: Tuple[Token, ...]) -> str:
    """Render tokens as text, e.g. ``0 && (1 || !2)``."""
    parts: List[str] = []
    for token in tokens:
        text = str(token)
        if parts and (parts[-1].endswith((LPAREN, NOT)) or text == RPAREN):
            parts[-1] += text
        else:
            parts.append(text)
    return " ".join(parts)


@dataclass(frozen=True)
class PrimedExpression:
    """A raw expression with every predicate replaced by its symbol."""
    expression: str
    tokens: Tuple[Token, ...]
    positions: Tuple[int, ...]
    symbol_map: Mapping[Symbol, Predicate]

    @property
    def text(self) -> str:
        return render(self.tokens)


@dataclass(frozen=True)
class PostfixExpression:
    """Symbols and operators in reverse Polish order, no parentheses."""
    expression: str
    tokens: Tuple[Token, ...]

    @property
    def text(self) -> str:
        return " ".join(str(t) for t in self.tokens)

    def __iter__(self):
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)


class ExpressionPrimer:
    """
    Scans a raw expression and assigns each distinct predicate a symbol.

    At every position a structural token (operator, parenthesis or
    whitespace) is tried first, otherwise the longest substring the
    predicate type accepts. Symbols are handed out in first-seen order
    and an identical predicate text reuses its symbol.
    """

    def __init__(
        self,
        predicate_type: PredicateType,
        max_predicates: Optional[int] = None,
        keyword_operators: bool = True,
    ):
        self.predicate_type = predicate_type
        self.max_predicates = max_predicates
        self.keyword_operators = keyword_operators

    def prime(self, expression: str) -> PrimedExpression:
        """
        Prime an expression.

        Args:
            expression: The raw filter expression.

        Returns:
            PrimedExpression holding the token sequence and symbol map.

        Raises:
            ParsingError: On an unrecognised token or too many predicates.
        """
        tokens: List[Token] = []
        positions: List[int] = []
        symbols: Dict[str, Symbol] = {}
        symbol_map: Dict[Symbol, Predicate] = {}

        i = 0
        length = len(expression)
        while i < length:
            char = expression[i]

            if char.isspace():
                i += 1
                continue

            op, size = self._match_operator(expression, i)
            if op is not None:
                tokens.append(op)
                positions.append(i)
                i += size
                continue

            end = self._longest_predicate(expression, i)
            if end is None:
                raise ParsingError("Unrecognised token", expression, position=i)

            text = expression[i:end]
            symbol = symbols.get(text)
            if symbol is None:
                symbol = len(symbols)
                if self.max_predicates is not None and symbol >= self.max_predicates:
                    raise ParsingError(
                        f"More than {self.max_predicates} distinct predicates",
                        expression,
                        position=i,
                    )
                symbols[text] = symbol
                symbol_map[symbol] = self.predicate_type.build(text)

            tokens.append(symbol)
            positions.append(i)
            i = end

        logger.debug(
            "Primed %r as %r with %d predicate(s)",
            expression, render(tuple(tokens)), len(symbol_map),
        )
        return PrimedExpression(
            expression=expression,
            tokens=tuple(tokens),
            positions=tuple(positions),
            symbol_map=MappingProxyType(symbol_map),
        )

    def _match_operator(self, expr: str, i: int) -> Tuple[Optional[str], int]:
        """Match a structural token at position i."""
        char = expr[i]
        if char in (LPAREN, RPAREN):
            return char, 1

        pair = expr[i:i+2]
        if pair in (AND, OR):
            return SYMBOLIC_OPS[pair], 2
        if char in SYMBOLIC_OPS:
            return SYMBOLIC_OPS[char], 1

        if self.keyword_operators:
            m = _KEYWORD_RE.match(expr, i)
            if m:
                return KEYWORD_OPS[m.group(1).upper()], len(m.group(1))

        return None, 0

    def _longest_predicate(self, expr: str, start: int) -> Optional[int]:
        """Return the end of the longest valid predicate starting at start."""
        scan = getattr(self.predicate_type, "scan", None)
        if scan is not None:
            return scan(expr, start)
        for end in range(len(expr), start, -1):
            if self.predicate_type.is_valid(expr[start:end]):
                return end
        return None


class ShuntingYardConverter:
    """
    Converts a primed infix expression into postfix order.

    NOT binds tighter than AND, which binds tighter than OR. NOT is unary
    and right-associative; AND and OR are left-associative.
    """

    def convert(self, primed: PrimedExpression) -> PostfixExpression:
        """
        Convert to postfix.

        Args:
            primed: Output of ExpressionPrimer.prime.

        Returns:
            PostfixExpression.

        Raises:
            ParsingError: On unbalanced parentheses or an operator or
                operand out of place.
        """
        output: List[Token] = []
        stack: List[Tuple[str, int]] = []
        # Operands and operators must alternate
        expect_operand = True

        for token, position in zip(primed.tokens, primed.positions):
            if is_symbol(token) or token in (LPAREN, NOT):
                if not expect_operand:
                    raise ParsingError(
                        f"Missing operator before {_describe(token)}",
                        primed.expression,
                        position=position,
                    )
                expect_operand = not is_symbol(token)
            else:
                if expect_operand:
                    raise ParsingError(
                        f"Missing operand before {_describe(token)}",
                        primed.expression,
                        position=position,
                    )
                expect_operand = token != RPAREN

            if is_symbol(token):
                output.append(token)
            elif token == LPAREN:
                stack.append((token, position))
            elif token == RPAREN:
                while stack and stack[-1][0] != LPAREN:
                    output.append(stack.pop()[0])
                if not stack:
                    raise ParsingError(
                        "Unbalanced parentheses: unmatched ')'",
                        primed.expression,
                        position=position,
                    )
                stack.pop()
            else:
                precedence = PRECEDENCE[token]
                while stack and stack[-1][0] != LPAREN:
                    top = PRECEDENCE[stack[-1][0]]
                    if top > precedence or (
                        top == precedence and token not in RIGHT_ASSOCIATIVE
                    ):
                        output.append(stack.pop()[0])
                    else:
                        break
                stack.append((token, position))

        if expect_operand:
            raise ParsingError(
                "Missing operand at end of expression",
                primed.expression,
                position=len(primed.expression),
            )

        while stack:
            token, position = stack.pop()
            if token == LPAREN:
                raise ParsingError(
                    "Unbalanced parentheses: unmatched '('",
                    primed.expression,
                    position=position,
                )
            output.append(token)

        return PostfixExpression(expression=primed.expression, tokens=tuple(output))
