"""
Expression language for metric formulas and protocol triggers.

Formulas are arithmetic over biomarker slugs (``{triglicerideos} / {hdl}``);
trigger conditions are comparisons joined by AND/OR
(``insulina > 8 OR triglicerideos > 100``). Both are parsed once into an
immutable tree and evaluated against a slug -> value map.

Grammar (AND binds tighter than OR, keywords are case-insensitive)::

    or_expr    := and_expr ("OR" and_expr)*
    and_expr   := bool_atom ("AND" bool_atom)*
    bool_atom  := "(" or_expr ")" | comparison
    comparison := arith (">" | "<" | ">=" | "<=" | "=" | "==") arith
    arith      := term (("+" | "-") term)*
    term       := factor (("*" | "/") factor)*
    factor     := NUMBER | IDENT | "{" IDENT "}" | "-" factor | "(" arith ")"
"""
from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Mapping, Union

from logical_brain.exceptions import ExpressionError

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<number>\d+(?:\.\d+)?|\.\d+)
    | (?P<placeholder>\{\s*[A-Za-z_][A-Za-z0-9_]*\s*\})
    | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<cmp>>=|<=|==|>|<|=)
    | (?P<op>[-+*/])
    | (?P<lparen>\()
    | (?P<rparen>\))
    """,
    re.VERBOSE,
)

_KEYWORDS = {"and": "AND", "or": "OR"}

_ARITHMETIC: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}

_COMPARISONS: dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "=": operator.eq,
    "==": operator.eq,
}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


def tokenize(expression: str) -> list[Token]:
    tokens: list[Token] = []
    position = 0
    while position < len(expression):
        match = _TOKEN_RE.match(expression, position)
        if match is None:
            raise ExpressionError(
                f"Unexpected character {expression[position]!r}", expression=expression, position=position
            )
        kind = match.lastgroup
        text = match.group(0)
        if kind == "ident":
            keyword = _KEYWORDS.get(text.lower())
            tokens.append(Token(keyword or "ident", text.lower(), position))
        elif kind == "placeholder":
            tokens.append(Token("ident", text.strip("{} \t").lower(), position))
        elif kind != "ws":
            tokens.append(Token(kind, text, position))
        position = match.end()
    tokens.append(Token("eof", "", len(expression)))
    return tokens


# ── Tree ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Negate:
    operand: "Arithmetic"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Arithmetic"
    right: "Arithmetic"


@dataclass(frozen=True)
class Comparison:
    op: str
    left: "Arithmetic"
    right: "Arithmetic"


@dataclass(frozen=True)
class Logical:
    op: str  # "AND" | "OR"
    operands: tuple["Condition", ...]


Arithmetic = Union[Number, Variable, Negate, BinaryOp]
Condition = Union[Comparison, Logical]
Node = Union[Arithmetic, Condition]


class _Parser:
    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = tokenize(expression)
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _expect(self, kind: str) -> Token:
        if self.current.kind != kind:
            self._fail(f"Expected {kind}, found {self.current.text or 'end of expression'!r}")
        return self._advance()

    def _fail(self, message: str):
        raise ExpressionError(message, expression=self.expression, position=self.current.position)

    def parse_formula(self) -> Arithmetic:
        node = self._arith()
        self._expect("eof")
        return node

    def parse_condition(self) -> Condition:
        node = self._or()
        self._expect("eof")
        return node

    def _or(self) -> Condition:
        operands = [self._and()]
        while self.current.kind == "OR":
            self._advance()
            operands.append(self._and())
        return operands[0] if len(operands) == 1 else Logical("OR", tuple(operands))

    def _and(self) -> Condition:
        operands = [self._bool_atom()]
        while self.current.kind == "AND":
            self._advance()
            operands.append(self._bool_atom())
        return operands[0] if len(operands) == 1 else Logical("AND", tuple(operands))

    def _bool_atom(self) -> Condition:
        if self.current.kind == "lparen":
            # "(" may open a grouped condition or an arithmetic operand: "(a + b) > 3"
            saved = self.index
            self._advance()
            try:
                node = self._or()
                self._expect("rparen")
                if self.current.kind != "cmp":
                    return node
            except ExpressionError:
                pass
            self.index = saved
        return self._comparison()

    def _comparison(self) -> Comparison:
        left = self._arith()
        if self.current.kind != "cmp":
            self._fail("Expected a comparison operator")
        op = self._advance().text
        right = self._arith()
        return Comparison(op, left, right)

    def _arith(self) -> Arithmetic:
        node = self._term()
        while self.current.kind == "op" and self.current.text in "+-":
            op = self._advance().text
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Arithmetic:
        node = self._factor()
        while self.current.kind == "op" and self.current.text in "*/":
            op = self._advance().text
            node = BinaryOp(op, node, self._factor())
        return node

    def _factor(self) -> Arithmetic:
        token = self.current
        if token.kind == "number":
            self._advance()
            return Number(float(token.text))
        if token.kind == "ident":
            self._advance()
            return Variable(token.text)
        if token.kind == "op" and token.text == "-":
            self._advance()
            return Negate(self._factor())
        if token.kind == "lparen":
            self._advance()
            node = self._arith()
            self._expect("rparen")
            return node
        self._fail(f"Unexpected token {token.text or 'end of expression'!r}")


@lru_cache(maxsize=1024)
def parse_formula(expression: str) -> Arithmetic:
    return _Parser(expression).parse_formula()


@lru_cache(maxsize=1024)
def parse_condition(expression: str) -> Condition:
    return _Parser(expression).parse_condition()


def variables(node: Node) -> frozenset[str]:
    """Every slug the expression references."""
    if isinstance(node, Variable):
        return frozenset({node.name})
    if isinstance(node, Number):
        return frozenset()
    if isinstance(node, Negate):
        return variables(node.operand)
    if isinstance(node, (BinaryOp, Comparison)):
        return variables(node.left) | variables(node.right)
    return frozenset().union(*(variables(operand) for operand in node.operands))


def evaluate_arithmetic(node: Arithmetic, values: Mapping[str, float]) -> float:
    if isinstance(node, Number):
        return node.value
    if isinstance(node, Variable):
        if node.name not in values:
            raise ExpressionError(f"Missing value for {node.name!r}")
        return float(values[node.name])
    if isinstance(node, Negate):
        return -evaluate_arithmetic(node.operand, values)
    left = evaluate_arithmetic(node.left, values)
    right = evaluate_arithmetic(node.right, values)
    try:
        return _ARITHMETIC[node.op](left, right)
    except ZeroDivisionError as exc:
        raise ExpressionError("Division by zero") from exc


def evaluate_condition(node: Condition, values: Mapping[str, float]) -> bool:
    if isinstance(node, Comparison):
        left = evaluate_arithmetic(node.left, values)
        right = evaluate_arithmetic(node.right, values)
        return _COMPARISONS[node.op](left, right)
    if node.op == "AND":
        return all(evaluate_condition(operand, values) for operand in node.operands)
    return any(evaluate_condition(operand, values) for operand in node.operands)
