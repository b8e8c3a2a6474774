"""Macro dictionary storage"""

import os
import tempfile
import tomllib
from pathlib import Path
from typing import Any, Optional

from chat_rewriter.config import MACROS_FILE
from chat_rewriter.helpers import log_debug, log_event
from chat_rewriter.services.validation import parse_and_validate

EXAMPLE_MACROS = """\
# Example macros
# Syntax: "<macro> arg1 arg2 ..."
# Placeholders:
#   {{1}}, {{2}}, ... = positional args
#   {{*}} or {{arg}} = all args joined by space

aiu = "Update {{1}} in {{2}} and emit the full file."
ex = "Explain {{*}} step by step, including reasoning."
gen = "Generate {{1}} using {{2}} with options: {{*}}"
"""


def _resolve(path: Optional[str | Path]) -> Path:
    return Path(path if path is not None else MACROS_FILE)


def read_raw(path: Optional[str | Path] = None) -> str:
    """Get the stored macro text, or the example text if no file is stored"""
    try:
        return _resolve(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return EXAMPLE_MACROS


def load_macros(path: Optional[str | Path] = None) -> Optional[dict[str, Any]]:
    """Load the stored macro dictionary, returning None if absent or malformed"""
    file = _resolve(path)
    try:
        raw = file.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as err:
        log_debug(f"could not read {file}: {err}")
        return None

    if not raw:
        return None

    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as err:
        log_debug(f"ignoring malformed macros in {file}: {err}")
        return None

    return data if isinstance(data, dict) else None


def save_macros(raw: str, path: Optional[str | Path] = None) -> dict[str, str]:
    """Validate and store raw macro text, keeping the old file on failure"""
    macros = parse_and_validate(raw)

    file = _resolve(path)
    file.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=file.parent, prefix=f".{file.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(raw)
        os.replace(tmp_name, file)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    log_event("macros updated")
    return macros


def init_macros(path: Optional[str | Path] = None) -> bool:
    """Store the example macros if nothing is stored yet"""
    file = _resolve(path)
    file.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(file, "x", encoding="utf-8") as f:
            f.write(EXAMPLE_MACROS)
    except FileExistsError:
        return False

    log_event("macros updated")
    return True
