"""App configuration and setup"""

import os

from dotenv import load_dotenv

load_dotenv()

VERSION = "0.5.0"
LOG_PREFIX = f"[chatgpt-input-rewriter v{VERSION}]"

# === Macro storage ===

MACROS_FILE = os.getenv("CHAT_REWRITER_MACROS_FILE", "macros.toml")

# === Interception configuration ===

CONVERSATION_PATH = os.getenv(
    "CHAT_REWRITER_CONVERSATION_PATH", "/backend-api/conversation"
)
MESSAGES_MARKER = os.getenv("CHAT_REWRITER_MESSAGES_MARKER", '"messages"')

try:
    REQUEST_TIMEOUT = float(os.getenv("CHAT_REWRITER_TIMEOUT", "30"))
except ValueError as err:
    raise ValueError("CHAT_REWRITER_TIMEOUT must be a number of seconds") from err

if not CONVERSATION_PATH or not MESSAGES_MARKER:
    raise ValueError(
        "CHAT_REWRITER_CONVERSATION_PATH and CHAT_REWRITER_MESSAGES_MARKER"
        " must not be empty"
    )

# === API configuration ===

CHAT_REWRITER_API_KEY = os.getenv("CHAT_REWRITER_API_KEY", None)

