"""Tests for macro dictionary validation"""

import pytest

from chat_rewriter.services.validation import (
    MacroValidationError,
    is_valid_macro_name,
    parse_and_validate,
    validate_macros,
)


@pytest.mark.parametrize("name", ["ex", "aiu", "gen", "a1b2", "x9"])
def test_valid_names(name):
    assert is_valid_macro_name(name)


@pytest.mark.parametrize("name", ["toolong12", "A", "1x", "e", "Ex", "a-b", "abcde", ""])
def test_invalid_names(name):
    assert not is_valid_macro_name(name)


def test_accepts_simple_dictionary():
    assert validate_macros({"ex": "foo"}) == {"ex": "foo"}


def test_accepts_empty_dictionary():
    assert validate_macros({}) == {}


@pytest.mark.parametrize("data", [None, [], "ex", 1])
def test_rejects_non_object_root(data):
    with pytest.raises(MacroValidationError, match="Root must be an object"):
        validate_macros(data)


@pytest.mark.parametrize("name", ["toolong12", "A", "1x"])
def test_rejects_bad_key(name):
    with pytest.raises(MacroValidationError, match=f"Invalid macro name: {name}"):
        validate_macros({"ex": "ok", name: "foo"})


@pytest.mark.parametrize("value", [1, None, ["a"], {"a": "b"}, True])
def test_rejects_non_string_value(value):
    with pytest.raises(MacroValidationError) as exc:
        validate_macros({"ex": value})
    assert str(exc.value) == 'Macro value for "ex" must be a string'


def test_reports_first_violation():
    with pytest.raises(MacroValidationError) as exc:
        validate_macros({"ok": "fine", "BAD": 1, "zz": 2})
    assert str(exc.value) == "Invalid macro name: BAD"


def test_parse_and_validate_toml():
    raw = '# comment\nex = "Explain {{*}}"\ngen = "Generate {{1}}"\n'
    assert parse_and_validate(raw) == {
        "ex": "Explain {{*}}",
        "gen": "Generate {{1}}",
    }


def test_parse_and_validate_rejects_broken_toml():
    with pytest.raises(MacroValidationError, match="Invalid TOML"):
        parse_and_validate('ex = "unterminated')


def test_parse_and_validate_rejects_tables():
    with pytest.raises(MacroValidationError, match='Macro value for "ex"'):
        parse_and_validate('[ex]\nfoo = "bar"\n')


def test_validation_error_is_value_error():
    assert issubclass(MacroValidationError, ValueError)
