"""Submit-time rewriting of outgoing conversation requests"""

import functools
import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

import httpx

from chat_rewriter.config import CONVERSATION_PATH, MESSAGES_MARKER
from chat_rewriter.helpers import log_debug, log_event
from chat_rewriter.macros import expand
from chat_rewriter.services import macro_store

T = TypeVar("T")
R = TypeVar("R")

DictionaryLoader = Callable[[], Optional[Mapping[str, Any]]]
EventLogger = Callable[[str, Any], None]


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A stage that produced a value"""

    value: T


@dataclass(frozen=True)
class Failed:
    """A stage that could not continue, and why"""

    reason: str


StageResult = Union[Ok[T], Failed]


@dataclass(frozen=True)
class Rewrite:
    """A rewritten request body along with the message text before and after"""

    body: bytes
    original: str
    rewritten: str


def is_candidate(url: str, body_text: Optional[str]) -> bool:
    """Check if a request looks like a new chat submission"""
    if CONVERSATION_PATH in url:
        return True
    return body_text is not None and MESSAGES_MARKER in body_text


def decode_body(body: Optional[bytes]) -> StageResult[str]:
    """Get the body as text"""
    if body is None:
        return Failed("body is not readable")
    try:
        return Ok(body.decode("utf-8"))
    except UnicodeDecodeError:
        return Failed("body is not text")


def parse_body(body_text: str) -> StageResult[Any]:
    """Parse the body as JSON"""
    try:
        return Ok(json.loads(body_text))
    except ValueError as err:
        return Failed(f"body is not JSON: {err}")


def _first_parts(data: Any) -> Optional[list[Any]]:
    if not isinstance(data, dict):
        return None
    messages = data.get("messages")
    if not isinstance(messages, list) or not messages:
        return None
    message = messages[0]
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts:
        return None
    return parts


def extract_text(data: Any) -> StageResult[str]:
    """Get messages[0].content.parts[0] if it is a string"""
    parts = _first_parts(data)
    if parts is None:
        return Failed("payload has no messages[0].content.parts")
    if not isinstance(parts[0], str):
        return Failed("messages[0].content.parts[0] is not a string")
    return Ok(parts[0])


def load_dictionary(loader: DictionaryLoader) -> StageResult[Optional[Mapping[str, Any]]]:
    """Load a fresh macro dictionary, treating malformed state as absent"""
    try:
        macros = loader()
    except Exception as err:  # pylint: disable=broad-except
        return Failed(f"could not load macros: {err}")
    if macros is not None and not isinstance(macros, Mapping):
        return Ok(None)
    return Ok(macros)


def encode_body(data: Any, text: str) -> StageResult[bytes]:
    """Put the new text back into the payload and serialize it"""
    parts = _first_parts(data)
    if parts is None:
        return Failed("payload has no messages[0].content.parts")
    parts[0] = text
    try:
        return Ok(
            json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        )
    except (TypeError, ValueError) as err:
        return Failed(f"could not encode payload: {err}")


def rewrite_body(
    url: str, body: Optional[bytes], loader: DictionaryLoader
) -> StageResult[Rewrite]:
    """Run the rewrite stages on a request body.

    Returns Ok with the new body only if a macro changed the message text.
    Every other outcome is a Failed carrying the reason the request should
    be passed through as-is.
    """
    decoded = decode_body(body)
    body_text = decoded.value if isinstance(decoded, Ok) else None

    if not is_candidate(url, body_text):
        return Failed("not a conversation request")
    if isinstance(decoded, Failed):
        return decoded

    parsed = parse_body(decoded.value)
    if isinstance(parsed, Failed):
        return parsed

    extracted = extract_text(parsed.value)
    if isinstance(extracted, Failed):
        return extracted

    loaded = load_dictionary(loader)
    if isinstance(loaded, Failed):
        return loaded

    original = extracted.value
    rewritten = expand(original, loaded.value)
    if rewritten == original:
        return Failed("no macro applied")

    encoded = encode_body(parsed.value, rewritten)
    if isinstance(encoded, Failed):
        return encoded

    return Ok(Rewrite(body=encoded.value, original=original, rewritten=rewritten))


def _read_content(request: httpx.Request) -> Optional[bytes]:
    try:
        return request.content
    except httpx.RequestNotRead:
        # Streaming bodies are never buffered here
        return None


def _with_content(request: httpx.Request, body: bytes) -> httpx.Request:
    headers = request.headers.copy()
    headers.pop("Content-Length", None)
    return httpx.Request(
        request.method,
        request.url,
        headers=headers,
        content=body,
        extensions=dict(request.extensions),
    )


def _describe(request: httpx.Request) -> str:
    return f"{request.method} {request.url.copy_with(query=None)}"


def rewrite_request(
    request: httpx.Request,
    loader: Optional[DictionaryLoader] = None,
    log: Optional[EventLogger] = None,
) -> httpx.Request:
    """Get the request to forward: a rewritten copy, or the same request object"""
    try:
        result = rewrite_body(
            str(request.url),
            _read_content(request),
            loader or macro_store.load_macros,
        )
        if isinstance(result, Failed):
            log_debug(f"passing through {_describe(request)}: {result.reason}")
            return request
        rewritten_request = _with_content(request, result.value.body)
    except Exception as err:  # pylint: disable=broad-except
        log_debug(f"passing through {_describe(request)} after error: {err}")
        return request

    try:
        (log or log_event)(
            "macro rewritten",
            {"from": result.value.original, "to": result.value.rewritten},
        )
    except Exception:  # pylint: disable=broad-except
        pass

    return rewritten_request


def intercept(
    next_send: Callable[[httpx.Request], R],
    loader: Optional[DictionaryLoader] = None,
    log: Optional[EventLogger] = None,
) -> Callable[[httpx.Request], R]:
    """Wrap a send function so conversation requests are rewritten first.

    The wrapper returns whatever next_send returns, so an async next_send
    still hands back its awaitable untouched.
    """

    @functools.wraps(next_send)
    def send(request: httpx.Request) -> R:
        return next_send(rewrite_request(request, loader, log))

    return send


class RewritingTransport(httpx.BaseTransport):
    """Transport that rewrites conversation requests before sending them"""

    def __init__(
        self,
        transport: Optional[httpx.BaseTransport] = None,
        loader: Optional[DictionaryLoader] = None,
        log: Optional[EventLogger] = None,
    ) -> None:
        self._transport = transport or httpx.HTTPTransport()
        self._send = intercept(self._transport.handle_request, loader, log)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._send(request)

    def close(self) -> None:
        self._transport.close()


class AsyncRewritingTransport(httpx.AsyncBaseTransport):
    """Async transport that rewrites conversation requests before sending them"""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        loader: Optional[DictionaryLoader] = None,
        log: Optional[EventLogger] = None,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._send = intercept(self._transport.handle_async_request, loader, log)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._send(request)

    async def aclose(self) -> None:
        await self._transport.aclose()
