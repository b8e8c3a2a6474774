"""Macro expansion for outgoing chat messages"""

import re
from collections.abc import Mapping
from typing import Any, Optional, TypedDict

PLACEHOLDER_ALL = ("{{*}}", "{{arg}}")

# JavaScript's \s set, not str.split()'s
WHITESPACE = re.compile(
    r"[\t\n\v\f\r \xa0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]+"
)


class MacroInvocation(TypedDict):
    """A macro name followed by its positional args"""

    name: str
    args: list[str]


def parse_invocation(text: str) -> Optional[MacroInvocation]:
    """Split text into a macro name and its args, or None if there are no tokens"""
    tokens = [token for token in WHITESPACE.split(text) if token]
    if not tokens:
        return None
    return {"name": tokens[0], "args": tokens[1:]}


def positional_placeholder(index: int) -> str:
    """Placeholder for the 1-indexed positional argument"""
    return "{{" + str(index) + "}}"


def expand(text: Any, macros: Optional[Mapping[str, Any]]) -> Any:
    """Expand a macro invocation in the given text.

    Anything that is not a known macro invocation is returned as-is, so
    unknown words, blank input and a missing dictionary all pass the
    original text straight through.
    """
    if not isinstance(text, str) or not isinstance(macros, Mapping):
        return text

    invocation = parse_invocation(text)
    if invocation is None:
        return text

    template = macros.get(invocation["name"])
    if not isinstance(template, str):
        return text

    args = invocation["args"]
    rewritten = template

    for index, arg in enumerate(args, start=1):
        rewritten = rewritten.replace(positional_placeholder(index), arg)

    all_args = " ".join(args)
    for placeholder in PLACEHOLDER_ALL:
        rewritten = rewritten.replace(placeholder, all_args)

    return rewritten
