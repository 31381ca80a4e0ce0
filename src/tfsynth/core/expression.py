"""Single-variable algebraic expressions.

Parses text such as "(s^2+2*s+4)*(s+2)" or "2*(1-z^-1)^3" into an expression
tree and expands it into a flat polynomial. The grammar:

    expression := term (("+" | "-") term)*
    term       := unary (("*" | "/") unary | implicit)*
    implicit   := power starting with VARIABLE or "("
    unary      := ("-" | "+") unary | power
    power      := primary ("^" unary)?
    primary    := NUMBER | VARIABLE | "(" expression ")"

"^" binds tighter than unary minus and is right-associative, so "-s^2" is
-(s^2) and "z^-1" is z to the power -1. Juxtaposition multiplies: "2s",
"2(s+1)" and "(s+1)(s+2)" are accepted. A number cannot follow another factor
without an operator, so "2 3" and "1.2.3" are rejected.

Functions:
    parse: Text to expression tree
    solve: Text to canonical expanded text
    try_solve: solve() returning (text, error message) instead of raising
    split_additive_terms: Split on top-level "+" and "-"
    extract_power_coefficient_pairs: Terms to (power, coefficient) pairs
    collect_like_terms: Sum coefficients that share a power

Example:
    >>> from tfsynth.core.expression import solve
    >>> solve("(s+1)^2")
    's^2+2*s+1'
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from tfsynth.core.polynomial import Polynomial, PolynomialTerm, format_number
from tfsynth.exceptions import EvaluationError, ParseError, TFSynthError

# Precedence levels used when rendering trees back to text
_PREC_SUM = 1
_PREC_PRODUCT = 2
_PREC_UNARY = 3
_PREC_POWER = 4
_PREC_ATOM = 5


class Expression(ABC):
    """Node of an expression tree.

    Operators build new trees, so expressions can be assembled in code as
    well as parsed:

        >>> z = Variable("z")
        >>> str(2 * (1 - z**-1))
        '2*(1-z^-1)'
    """

    precedence = _PREC_ATOM

    @abstractmethod
    def expand(self) -> Polynomial:
        """Reduce the tree to a flat polynomial."""

    @abstractmethod
    def variables(self) -> set[str]:
        """Names of the free variables in the tree."""

    def _wrapped(self, level: int) -> str:
        text = str(self)
        return f"({text})" if self.precedence < level else text

    @staticmethod
    def _lift(value: Expression | float) -> Expression:
        return value if isinstance(value, Expression) else Number(float(value))

    def __add__(self, other: Expression | float) -> Expression:
        return Add(self, self._lift(other))

    def __radd__(self, other: float) -> Expression:
        return Add(self._lift(other), self)

    def __sub__(self, other: Expression | float) -> Expression:
        return Subtract(self, self._lift(other))

    def __rsub__(self, other: float) -> Expression:
        return Subtract(self._lift(other), self)

    def __mul__(self, other: Expression | float) -> Expression:
        return Multiply(self, self._lift(other))

    def __rmul__(self, other: float) -> Expression:
        return Multiply(self._lift(other), self)

    def __truediv__(self, other: Expression | float) -> Expression:
        return Divide(self, self._lift(other))

    def __rtruediv__(self, other: float) -> Expression:
        return Divide(self._lift(other), self)

    def __pow__(self, other: Expression | float) -> Expression:
        return Power(self, self._lift(other))

    def __neg__(self) -> Expression:
        return Negate(self)


@dataclass(frozen=True, eq=True)
class Number(Expression):
    value: float

    @property
    def precedence(self) -> int:  # type: ignore[override]
        return _PREC_UNARY if self.value < 0 else _PREC_ATOM

    def expand(self) -> Polynomial:
        return Polynomial.constant(self.value)

    def variables(self) -> set[str]:
        return set()

    def __str__(self) -> str:
        return format_number(self.value)


@dataclass(frozen=True, eq=True)
class Variable(Expression):
    name: str

    def expand(self) -> Polynomial:
        return Polynomial.monomial(1.0, 1)

    def variables(self) -> set[str]:
        return {self.name}

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, eq=True)
class Negate(Expression):
    operand: Expression

    precedence = _PREC_UNARY

    def expand(self) -> Polynomial:
        return -self.operand.expand()

    def variables(self) -> set[str]:
        return self.operand.variables()

    def __str__(self) -> str:
        return "-" + self.operand._wrapped(_PREC_UNARY)


@dataclass(frozen=True, eq=True)
class _Binary(Expression):
    left: Expression
    right: Expression

    def variables(self) -> set[str]:
        return self.left.variables() | self.right.variables()


class Add(_Binary):
    precedence = _PREC_SUM

    def expand(self) -> Polynomial:
        return self.left.expand() + self.right.expand()

    def __str__(self) -> str:
        return f"{self.left}+{self.right._wrapped(_PREC_SUM)}"


class Subtract(_Binary):
    precedence = _PREC_SUM

    def expand(self) -> Polynomial:
        return self.left.expand() - self.right.expand()

    def __str__(self) -> str:
        return f"{self.left}-{self.right._wrapped(_PREC_SUM + 1)}"


class Multiply(_Binary):
    precedence = _PREC_PRODUCT

    def expand(self) -> Polynomial:
        return self.left.expand() * self.right.expand()

    def __str__(self) -> str:
        return f"{self.left._wrapped(_PREC_PRODUCT)}*{self.right._wrapped(_PREC_PRODUCT + 1)}"


class Divide(_Binary):
    precedence = _PREC_PRODUCT

    def expand(self) -> Polynomial:
        divisor = self.right.expand()
        if divisor.is_zero:
            raise EvaluationError(f"Division by zero in '{self}'")
        return self.left.expand() / divisor

    def __str__(self) -> str:
        return f"{self.left._wrapped(_PREC_PRODUCT)}/{self.right._wrapped(_PREC_PRODUCT + 1)}"


class Power(_Binary):
    precedence = _PREC_POWER

    def expand(self) -> Polynomial:
        exponent = self.right.expand()
        if not exponent.is_constant:
            raise EvaluationError(f"Exponent '{self.right}' is not a constant")
        return self.left.expand() ** exponent.constant_value()

    def __str__(self) -> str:
        # Exponent parses as a unary expression, so "z^-1" needs no parentheses
        return f"{self.left._wrapped(_PREC_ATOM)}^{self.right._wrapped(_PREC_UNARY)}"


# =============================================================================
# Tokenizer and parser
# =============================================================================

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    | (?P<name>[A-Za-z_]+)
    | (?P<op>[-+*/^()])
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    position: int


def _tokenize(text: str) -> list[_Token]:
    tokens = []
    position = 0
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if match is None:
            raise ParseError(f"Unexpected character '{text[position]}'", position)
        kind = match.lastgroup
        value = match.group()
        if kind == "name" and len(value) > 1:
            raise ParseError(f"Unknown token '{value}'", position)
        if kind != "space":
            tokens.append(_Token(kind, value, position))
        position = match.end()
    tokens.append(_Token("end", "", len(text)))
    return tokens


class _Parser:
    def __init__(self, text: str):
        self.tokens = _tokenize(text)
        self.index = 0

    @property
    def current(self) -> _Token:
        return self.tokens[self.index]

    def _accept(self, text: str) -> bool:
        if self.current.kind == "op" and self.current.text == text:
            self.index += 1
            return True
        return False

    def parse(self) -> Expression:
        if self.current.kind == "end":
            raise ParseError("Empty expression", 0)
        node = self._expression()
        if self.current.kind != "end":
            if self.current.text == ")":
                raise ParseError("Mismatched parentheses", self.current.position)
            raise ParseError(f"Unexpected '{self.current.text}'", self.current.position)
        return node

    def _expression(self) -> Expression:
        node = self._term()
        while True:
            if self._accept("+"):
                node = Add(node, self._term())
            elif self._accept("-"):
                node = Subtract(node, self._term())
            else:
                return node

    def _term(self) -> Expression:
        node = self._unary()
        while True:
            if self._accept("*"):
                node = Multiply(node, self._unary())
            elif self._accept("/"):
                node = Divide(node, self._unary())
            elif self.current.kind == "name" or self.current.text == "(":
                node = Multiply(node, self._power())
            elif self.current.kind == "number":
                raise ParseError(
                    f"Unexpected number '{self.current.text}'", self.current.position
                )
            else:
                return node

    def _unary(self) -> Expression:
        if self._accept("-"):
            return Negate(self._unary())
        if self._accept("+"):
            return self._unary()
        return self._power()

    def _power(self) -> Expression:
        base = self._primary()
        if self._accept("^"):
            return Power(base, self._unary())
        return base

    def _primary(self) -> Expression:
        token = self.current
        if token.kind == "number":
            self.index += 1
            return Number(float(token.text))
        if token.kind == "name":
            self.index += 1
            return Variable(token.text)
        if self._accept("("):
            node = self._expression()
            if not self._accept(")"):
                raise ParseError("Mismatched parentheses", self.current.position)
            return node
        if token.kind == "end":
            raise ParseError("Unexpected end of expression", token.position)
        raise ParseError(f"Unexpected '{token.text}'", token.position)


def _check_variables(found: set[str], variable: str | None) -> str | None:
    if len(found) > 1:
        raise ParseError(
            f"Expression has more than one free variable: {', '.join(sorted(found))}"
        )
    if variable is not None and found and found != {variable}:
        raise ParseError(f"Expected variable '{variable}', found '{found.pop()}'")
    return next(iter(found), variable)


def parse(text: str, variable: str | None = None) -> Expression:
    """Parse expression text into a tree.

    Args:
        text: Expression text
        variable: Required variable name, or None to accept any single letter

    Returns:
        Root node of the expression tree

    Raises:
        ParseError: On malformed syntax or more than one free variable
    """
    node = _Parser(text).parse()
    _check_variables(node.variables(), variable)
    return node


def solve(text: str, variable: str | None = None) -> str:
    """Expand an expression into canonical polynomial text.

    The result has no parentheses or powers of sums and is a fixed point:
    solve(solve(x)) == solve(x).

    Args:
        text: Expression text
        variable: Required variable name, or None to accept any single letter

    Returns:
        Expanded text such as "s^2+3*s+2"

    Raises:
        ParseError: On malformed syntax
        EvaluationError: On division by zero or a non-polynomial result
    """
    node = parse(text, variable)
    name = _check_variables(node.variables(), variable) or "s"
    return node.expand().to_text(name)


def try_solve(text: str, variable: str | None = None) -> tuple[str, str]:
    """Like solve(), but report failures as an error message.

    Returns:
        (canonical text, "") on success or ("", error message) on failure
    """
    try:
        return solve(text, variable), ""
    except TFSynthError as e:
        return "", str(e)


def split_additive_terms(text: str) -> list[str]:
    """Split text on "+" and "-" that are outside parentheses.

    Signs that are unary (at the start, after an operator or "(", or inside a
    number's exponent such as "1e-05") do not split. A "-" stays attached to
    the term it precedes; a leading "+" is dropped.

    Args:
        text: Expression text

    Returns:
        Term substrings in their original order

    Raises:
        ParseError: If parentheses are mismatched
    """
    terms: list[str] = []
    depth = 0
    start = 0
    previous = ""
    for i, char in enumerate(text):
        if char.isspace():
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise ParseError("Mismatched parentheses", i)
        elif char in "+-" and depth == 0 and previous and previous not in "+-*/^(":
            in_exponent = previous in "eE" and re.search(r"(?:\d|\d\.)[eE]\s*$", text[:i])
            if not in_exponent:
                terms.append(text[start:i])
                start = i
        previous = char
    if depth != 0:
        raise ParseError("Mismatched parentheses", len(text))
    terms.append(text[start:])

    result = []
    for term in terms:
        term = term.strip()
        if term.startswith("+"):
            term = term[1:].strip()
        if term:
            result.append(term)
    return result


def collect_like_terms(
    terms: Iterable[PolynomialTerm | tuple[int, float]],
) -> list[PolynomialTerm]:
    """Sum the coefficients of terms that share a power.

    Returns:
        One term per distinct power, highest power first
    """
    collected: dict[int, float] = {}
    for power, coefficient in terms:
        collected[int(power)] = collected.get(int(power), 0.0) + float(coefficient)
    return [PolynomialTerm(p, collected[p]) for p in sorted(collected, reverse=True)]


def extract_power_coefficient_pairs(
    terms: Iterable[str], variable: str | None = None
) -> list[PolynomialTerm]:
    """Read (power, coefficient) pairs from additive terms.

    Each term is of the form coefficient*variable^power; the power is 0 when
    the variable is absent and 1 when it has no exponent. Like powers are
    summed.

    Args:
        terms: Term strings, usually from split_additive_terms()
        variable: Required variable name, or None to accept any single letter

    Returns:
        Terms with distinct powers, highest power first

    Raises:
        ParseError: If a term is malformed or terms use different variables
    """
    pairs: list[PolynomialTerm] = []
    for text in terms:
        node = parse(text, variable)
        variable = _check_variables(node.variables(), variable)
        pairs.extend(node.expand().terms())
    return collect_like_terms(pairs)
