"""Kubernetes label selector parsing and matching.

Grammar (requirements are AND-ed)::

    selector    := requirement ("," requirement)*
    requirement := ["!"] KEY
                 | KEY ("=" | "==" | "!=") VALUE
                 | KEY ("in" | "notin") "(" VALUE ("," VALUE)* ")"

An empty expression selects everything.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum

from hncsel.domain.errors import SelectorSyntaxError

_SPECIAL_CHARS = frozenset("=!(),<>")

_NAME_RE = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_DNS1123_SUBDOMAIN_RE = re.compile(
    r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$"
)
_DNS1123_SUBDOMAIN_MAX_LENGTH = 253
_LABEL_VALUE_MAX_LENGTH = 63
_QUALIFIED_NAME_MAX_LENGTH = 63
_NAME_CHARSET_MESSAGE = (
    "must consist of alphanumeric characters, '-', '_' or '.', "
    "and must start and end with an alphanumeric character"
)


class TokenKind(Enum):
    """Lexical token categories."""

    IDENTIFIER = "identifier"
    DOES_NOT_EXIST = "!"
    EQUALS = "="
    DOUBLE_EQUALS = "=="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    GREATER_THAN = ">"
    LESS_THAN = "<"
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    COMMA = ","
    END = "end of string"


@dataclass(frozen=True)
class Token:
    """Single lexical token with its offset in the expression."""

    kind: TokenKind
    text: str
    position: int


_OPERATOR_TOKENS: dict[str, TokenKind] = {
    "==": TokenKind.DOUBLE_EQUALS,
    "!=": TokenKind.NOT_EQUALS,
    "=": TokenKind.EQUALS,
    "!": TokenKind.DOES_NOT_EXIST,
    "(": TokenKind.OPEN_PAREN,
    ")": TokenKind.CLOSE_PAREN,
    ",": TokenKind.COMMA,
    ">": TokenKind.GREATER_THAN,
    "<": TokenKind.LESS_THAN,
}

_KEYWORDS: dict[str, TokenKind] = {
    "in": TokenKind.IN,
    "notin": TokenKind.NOT_IN,
}


def tokenize(expression: str) -> list[Token]:
    """Split a selector expression into tokens, terminated by an END token."""
    tokens: list[Token] = []
    pos = 0
    length = len(expression)
    while pos < length:
        char = expression[pos]
        if char.isspace():
            pos += 1
            continue
        if char in _SPECIAL_CHARS:
            pair = expression[pos : pos + 2]
            if pair in _OPERATOR_TOKENS:
                tokens.append(Token(_OPERATOR_TOKENS[pair], pair, pos))
                pos += 2
            else:
                tokens.append(Token(_OPERATOR_TOKENS[char], char, pos))
                pos += 1
            continue
        start = pos
        while (
            pos < length
            and not expression[pos].isspace()
            and expression[pos] not in _SPECIAL_CHARS
        ):
            pos += 1
        word = expression[start:pos]
        tokens.append(Token(_KEYWORDS.get(word, TokenKind.IDENTIFIER), word, start))
    tokens.append(Token(TokenKind.END, "", length))
    return tokens


class Operator(Enum):
    """Requirement operators."""

    EQUALS = "="
    DOUBLE_EQUALS = "=="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    EXISTS = "exists"
    DOES_NOT_EXIST = "!"


_SINGLE_VALUE_OPERATORS = frozenset(
    {Operator.EQUALS, Operator.DOUBLE_EQUALS, Operator.NOT_EQUALS}
)
_SET_OPERATORS = frozenset({Operator.IN, Operator.NOT_IN})

_TOKEN_OPERATORS: dict[TokenKind, Operator] = {
    TokenKind.EQUALS: Operator.EQUALS,
    TokenKind.DOUBLE_EQUALS: Operator.DOUBLE_EQUALS,
    TokenKind.NOT_EQUALS: Operator.NOT_EQUALS,
    TokenKind.IN: Operator.IN,
    TokenKind.NOT_IN: Operator.NOT_IN,
}


@dataclass(frozen=True)
class Requirement:
    """One `key op values` clause of a selector."""

    key: str
    operator: Operator
    values: tuple[str, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        """Return whether the label set satisfies this requirement."""
        if self.operator is Operator.EXISTS:
            return self.key in labels
        if self.operator is Operator.DOES_NOT_EXIST:
            return self.key not in labels
        if self.operator in (Operator.NOT_EQUALS, Operator.NOT_IN):
            return self.key not in labels or labels[self.key] not in self.values
        return self.key in labels and labels[self.key] in self.values

    def __str__(self) -> str:
        if self.operator is Operator.EXISTS:
            return self.key
        if self.operator is Operator.DOES_NOT_EXIST:
            return f"!{self.key}"
        if self.operator in _SET_OPERATORS:
            return f"{self.key} {self.operator.value} ({','.join(self.values)})"
        return f"{self.key}{self.operator.value}{self.values[0]}"


@dataclass(frozen=True)
class Selector:
    """Conjunction of requirements; no requirements selects everything."""

    requirements: tuple[Requirement, ...] = field(default=())

    @classmethod
    def everything(cls) -> Selector:
        """Return the selector that matches every label set."""
        return cls()

    def empty(self) -> bool:
        """Return whether this selector has no requirements."""
        return not self.requirements

    def matches(self, labels: Mapping[str, str]) -> bool:
        """Return whether every requirement holds for the label set."""
        return all(req.matches(labels) for req in self.requirements)

    def __iter__(self) -> Iterator[Requirement]:
        return iter(self.requirements)

    def __str__(self) -> str:
        return ",".join(str(req) for req in sorted(self.requirements, key=_sort_key))


def _sort_key(req: Requirement) -> tuple[str, str]:
    return req.key, req.operator.value


def validate_label_key(key: str, *, check_name_length: bool = True) -> list[str]:
    """Return problems with a label key (qualified name), empty when valid.

    `check_name_length=False` skips the 63-character limit on the name part.
    """
    parts = key.split("/")
    if len(parts) == 1:
        prefix, name = "", parts[0]
    elif len(parts) == 2:
        prefix, name = parts
        if not prefix:
            return ["prefix part must be non-empty"]
    else:
        return [
            "a qualified name "
            + _NAME_CHARSET_MESSAGE
            + " with an optional DNS subdomain prefix and '/'"
        ]

    problems: list[str] = []
    if prefix:
        if len(prefix) > _DNS1123_SUBDOMAIN_MAX_LENGTH:
            problems.append(
                f"prefix part must be no more than {_DNS1123_SUBDOMAIN_MAX_LENGTH} characters"
            )
        if not _DNS1123_SUBDOMAIN_RE.match(prefix):
            problems.append(
                "prefix part must consist of lower case alphanumeric characters, "
                "'-' or '.', and must start and end with an alphanumeric character"
            )
    if not name:
        problems.append("name part must be non-empty")
    else:
        if check_name_length and len(name) > _QUALIFIED_NAME_MAX_LENGTH:
            problems.append(
                f"name part must be no more than {_QUALIFIED_NAME_MAX_LENGTH} characters"
            )
        if not _NAME_RE.match(name):
            problems.append("name part " + _NAME_CHARSET_MESSAGE)
    return problems


def validate_label_value(value: str) -> list[str]:
    """Return problems with a label value, empty when valid."""
    if not value:
        return []
    problems: list[str] = []
    if len(value) > _LABEL_VALUE_MAX_LENGTH:
        problems.append(f"must be no more than {_LABEL_VALUE_MAX_LENGTH} characters")
    if not _NAME_RE.match(value):
        problems.append("a valid label " + _NAME_CHARSET_MESSAGE)
    return problems


class _Parser:
    def __init__(self, expression: str, *, check_key_length: bool = True) -> None:
        self.expression = expression
        self.check_key_length = check_key_length
        self.tokens = tokenize(expression)
        self.index = 0

    def peek(self) -> Token:
        return self.tokens[self.index]

    def consume(self) -> Token:
        token = self.tokens[self.index]
        if token.kind is not TokenKind.END:
            self.index += 1
        return token

    def error(self, message: str, token: Token) -> SelectorSyntaxError:
        return SelectorSyntaxError(
            message, expression=self.expression, position=token.position
        )

    def unexpected(self, token: Token, expected: str) -> SelectorSyntaxError:
        return self.error(f"found {token.text!r}, expected: {expected}", token)

    def parse(self) -> Selector:
        if self.peek().kind is TokenKind.END:
            return Selector.everything()

        requirements: list[Requirement] = []
        while True:
            token = self.peek()
            if token.kind not in (TokenKind.IDENTIFIER, TokenKind.DOES_NOT_EXIST):
                raise self.unexpected(token, "'!', identifier")
            requirements.append(self.parse_requirement())

            token = self.consume()
            if token.kind is TokenKind.END:
                break
            if token.kind is not TokenKind.COMMA:
                raise self.unexpected(token, "',' or 'end of string'")
            if self.peek().kind is TokenKind.END:
                raise self.unexpected(self.peek(), "identifier after ','")
        return Selector(tuple(requirements))

    def parse_requirement(self) -> Requirement:
        negated = False
        if self.peek().kind is TokenKind.DOES_NOT_EXIST:
            self.consume()
            negated = True

        token = self.consume()
        if token.kind is not TokenKind.IDENTIFIER:
            raise self.unexpected(token, "identifier")
        key = token.text
        problems = validate_label_key(key, check_name_length=self.check_key_length)
        if problems:
            raise self.error(f"invalid label key {key!r}: {'; '.join(problems)}", token)

        if negated:
            return Requirement(key, Operator.DOES_NOT_EXIST)
        if self.peek().kind in (TokenKind.END, TokenKind.COMMA):
            return Requirement(key, Operator.EXISTS)

        operator = self.parse_operator()
        if operator in _SET_OPERATORS:
            values = self.parse_value_set(operator)
        else:
            values = (self.parse_exact_value(),)
        return Requirement(key, operator, values)

    def parse_operator(self) -> Operator:
        token = self.consume()
        if token.kind in (TokenKind.GREATER_THAN, TokenKind.LESS_THAN):
            raise self.error(
                f"operator {token.text!r} is not supported in label selectors", token
            )
        operator = _TOKEN_OPERATORS.get(token.kind)
        if operator is None:
            raise self.unexpected(token, "'=', '!=', '==', 'in', 'notin'")
        return operator

    def parse_exact_value(self) -> str:
        token = self.peek()
        if token.kind in (TokenKind.END, TokenKind.COMMA):
            return ""
        if token.kind is not TokenKind.IDENTIFIER:
            raise self.unexpected(token, "identifier")
        self.consume()
        self.check_value(token)
        return token.text

    def parse_value_set(self, operator: Operator) -> tuple[str, ...]:
        opening = self.consume()
        if opening.kind is not TokenKind.OPEN_PAREN:
            raise self.unexpected(opening, "'('")

        values: list[str] = []
        expect_value = True
        while True:
            token = self.consume()
            if token.kind is TokenKind.IDENTIFIER and expect_value:
                self.check_value(token)
                values.append(token.text)
                expect_value = False
            elif token.kind is TokenKind.COMMA:
                if expect_value:
                    values.append("")
                expect_value = True
            elif token.kind is TokenKind.CLOSE_PAREN:
                if expect_value and values:
                    values.append("")
                break
            else:
                raise self.unexpected(token, "',', ')' or identifier")

        if not values:
            raise self.error(
                f"for {operator.value!r} operator, values set can't be empty", opening
            )
        return tuple(sorted(set(values)))

    def check_value(self, token: Token) -> None:
        problems = validate_label_value(token.text)
        if problems:
            raise self.error(
                f"invalid label value {token.text!r}: {'; '.join(problems)}", token
            )


def parse_selector(expression: str, *, check_key_length: bool = True) -> Selector:
    """Parse a label selector expression.

    `check_key_length=False` accepts key names longer than 63 characters,
    as produced by appending a depth suffix to a namespace name.

    Raises
    ------
    SelectorSyntaxError
        If the expression does not follow the label selector grammar.
    """
    return _Parser(expression, check_key_length=check_key_length).parse()
