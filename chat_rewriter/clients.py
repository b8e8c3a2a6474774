"""Process-wide HTTP clients with request rewriting installed"""

import threading
from typing import Any

import httpx

from chat_rewriter.config import REQUEST_TIMEOUT
from chat_rewriter.interceptor import AsyncRewritingTransport, RewritingTransport

_lock = threading.Lock()
_client: httpx.Client | None = None
_async_client: httpx.AsyncClient | None = None


def get_client() -> httpx.Client:
    """Get the shared client, installing the rewriting transport on first use"""
    global _client  # pylint: disable=global-statement
    with _lock:
        if _client is None:
            _client = httpx.Client(
                transport=RewritingTransport(),
                timeout=httpx.Timeout(REQUEST_TIMEOUT),
            )
        return _client


def get_async_client() -> httpx.AsyncClient:
    """Get the shared async client, installing the rewriting transport on first use"""
    global _async_client  # pylint: disable=global-statement
    with _lock:
        if _async_client is None:
            _async_client = httpx.AsyncClient(
                transport=AsyncRewritingTransport(),
                timeout=httpx.Timeout(REQUEST_TIMEOUT),
            )
        return _async_client


def close_client() -> None:
    """Close the shared client so the next get_client() builds a new one"""
    global _client  # pylint: disable=global-statement
    with _lock:
        if _client is not None:
            _client.close()
        _client = None


async def aclose_async_client() -> None:
    """Close the shared async client so the next get_async_client() builds a new one"""
    global _async_client  # pylint: disable=global-statement
    with _lock:
        client, _async_client = _async_client, None
    if client is not None:
        await client.aclose()


def build_conversation_payload(prompt: str) -> dict[str, Any]:
    """Minimal conversation payload carrying a single user message"""
    return {
        "action": "next",
        "messages": [
            {
                "author": {"role": "user"},
                "content": {"content_type": "text", "parts": [prompt]},
            }
        ],
    }
