"""Tests for label selector parsing and matching."""

from __future__ import annotations

import pytest

from hncsel.domain.errors import SelectorSyntaxError
from hncsel.domain.label_selector import (
    Operator,
    TokenKind,
    parse_selector,
    tokenize,
    validate_label_key,
    validate_label_value,
)


def test_tokenize_operators() -> None:
    kinds = [t.kind for t in tokenize("a!=b, !c, d in (e)")]
    assert kinds == [
        TokenKind.IDENTIFIER,
        TokenKind.NOT_EQUALS,
        TokenKind.IDENTIFIER,
        TokenKind.COMMA,
        TokenKind.DOES_NOT_EXIST,
        TokenKind.IDENTIFIER,
        TokenKind.COMMA,
        TokenKind.IDENTIFIER,
        TokenKind.IN,
        TokenKind.OPEN_PAREN,
        TokenKind.IDENTIFIER,
        TokenKind.CLOSE_PAREN,
        TokenKind.END,
    ]


def test_empty_selector_matches_everything() -> None:
    for expression in ("", "   "):
        selector = parse_selector(expression)
        assert selector.empty()
        assert selector.matches({})
        assert selector.matches({"env": "prod"})


def test_equality() -> None:
    for expression in ("env=prod", "env==prod", " env = prod "):
        selector = parse_selector(expression)
        assert selector.matches({"env": "prod"})
        assert not selector.matches({"env": "staging"})
        assert not selector.matches({})


def test_inequality_matches_missing_key() -> None:
    selector = parse_selector("env!=prod")
    assert selector.matches({})
    assert selector.matches({"env": "dev"})
    assert not selector.matches({"env": "prod"})


def test_set_operators() -> None:
    selector = parse_selector("tier in (web, api)")
    assert selector.requirements[0].values == ("api", "web")
    assert selector.matches({"tier": "api"})
    assert not selector.matches({"tier": "db"})
    assert not selector.matches({})

    selector = parse_selector("tier notin (web)")
    assert selector.matches({})
    assert selector.matches({"tier": "api"})
    assert not selector.matches({"tier": "web"})


def test_existence() -> None:
    selector = parse_selector("env,!legacy")
    assert [r.operator for r in selector] == [Operator.EXISTS, Operator.DOES_NOT_EXIST]
    assert selector.matches({"env": "x"})
    assert not selector.matches({"env": "x", "legacy": ""})
    assert not selector.matches({"legacy": "true"})


def test_requirements_are_anded() -> None:
    selector = parse_selector("env=prod,team=a")
    assert selector.matches({"env": "prod", "team": "a"})
    assert not selector.matches({"env": "prod", "team": "b"})


def test_empty_values() -> None:
    assert parse_selector("key=").matches({"key": ""})
    assert not parse_selector("key=").matches({})
    assert parse_selector("a in (x,)").requirements[0].values == ("", "x")


def test_prefixed_keys() -> None:
    selector = parse_selector("example.com/app=web")
    assert selector.matches({"example.com/app": "web"})


def test_canonical_string() -> None:
    assert str(parse_selector("b=2, a in (y,x), !c")) == "a in (x,y),b=2,!c"


@pytest.mark.parametrize(
    "expression",
    [
        "env=prod,",
        "env in ()",
        "env in prod",
        "=prod",
        "env=prod extra",
        "env>1",
        "env<1",
        "bad_key-=x",
        "env=-bad",
        "/app=web",
        "a/b/c=d",
        "!env=prod",
        "env in (a b)",
    ],
)
def test_syntax_errors(expression: str) -> None:
    with pytest.raises(SelectorSyntaxError):
        parse_selector(expression)


def test_syntax_error_position() -> None:
    with pytest.raises(SelectorSyntaxError) as exc_info:
        parse_selector("env=prod,,x")
    assert exc_info.value.position == 9
    assert "position 9" in str(exc_info.value)


def test_unsupported_operator_message() -> None:
    with pytest.raises(SelectorSyntaxError, match="not supported"):
        parse_selector("replicas>1")


def test_key_name_length_limit() -> None:
    with pytest.raises(SelectorSyntaxError, match="no more than 63"):
        parse_selector("a" * 70 + "=b")
    assert parse_selector("a" * 63 + "=b").matches({"a" * 63: "b"})
    assert parse_selector("a" * 70, check_key_length=False).matches({"a" * 70: ""})
    assert validate_label_key("a" * 64)
    assert validate_label_key("a" * 64, check_name_length=False) == []


def test_validate_label_key() -> None:
    assert validate_label_key("app") == []
    assert validate_label_key("example.com/app") == []
    assert validate_label_key("team-a-depth") == []
    assert validate_label_key("Example.com/app")
    assert validate_label_key("-app")


def test_validate_label_value() -> None:
    assert validate_label_value("") == []
    assert validate_label_value("v1.2_3") == []
    assert validate_label_value("a" * 64)
    assert validate_label_value("bad value")
