"""Macro dictionary validation"""

import re
import tomllib
from collections.abc import Mapping
from typing import Any

MACRO_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9]{1,3}$")


class MacroValidationError(ValueError):
    """Raised when a macro dictionary is rejected"""


def is_valid_macro_name(name: Any) -> bool:
    """Check a key against the macro naming rule"""
    return isinstance(name, str) and MACRO_NAME_PATTERN.fullmatch(name) is not None


def validate_macros(data: Any) -> dict[str, str]:
    """Validate a parsed macro dictionary, raising on the first violation"""
    if data is None or not isinstance(data, Mapping):
        raise MacroValidationError("Root must be an object")

    for name, value in data.items():
        if not is_valid_macro_name(name):
            raise MacroValidationError(f"Invalid macro name: {name}")
        if not isinstance(value, str):
            raise MacroValidationError(f'Macro value for "{name}" must be a string')

    return dict(data)


def parse_and_validate(raw: str) -> dict[str, str]:
    """Parse raw TOML macro text and validate it"""
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as err:
        raise MacroValidationError(f"Invalid TOML: {err}") from err
    return validate_macros(data)
