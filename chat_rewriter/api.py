"""REST API endpoints for editing and previewing macros"""

from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status

from chat_rewriter.config import CHAT_REWRITER_API_KEY
from chat_rewriter.macros import expand
from chat_rewriter.services.macro_store import load_macros, read_raw, save_macros
from chat_rewriter.services.validation import MacroValidationError

if not CHAT_REWRITER_API_KEY:
    print("Warning: CHAT_REWRITER_API_KEY not set; API will reject all requests")

app = FastAPI()


def require_api_key(request: Request) -> None:
    """Validate Bearer token from Authorization header"""
    auth: Optional[str] = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )
    token: str = auth.split(" ", 1)[1].strip()
    if not CHAT_REWRITER_API_KEY or token != CHAT_REWRITER_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )


@app.get("/api/v1/macros")
async def get_macros(_: None = Depends(require_api_key)) -> dict[str, Any]:
    """Get the stored macro text and the dictionary it loads as"""
    return {"raw": read_raw(), "macros": load_macros()}


@app.put("/api/v1/macros")
async def put_macros(
    body: dict[str, Any],
    _: None = Depends(require_api_key),
) -> dict[str, Any]:
    """Validate and store new macro text"""
    raw: Optional[str] = body.get("raw")
    if not isinstance(raw, str):
        raise HTTPException(400, "Missing required fields")

    try:
        macros = save_macros(raw)
    except MacroValidationError as err:
        raise HTTPException(400, str(err)) from err
    except OSError as err:
        raise HTTPException(500, f"Could not store macros: {err}") from err

    return {"macros": macros}


@app.post("/api/v1/expand")
async def preview_expansion(
    body: dict[str, Any],
    _: None = Depends(require_api_key),
) -> dict[str, Any]:
    """Preview what a message would be rewritten to"""
    text: Optional[str] = body.get("text")
    if not isinstance(text, str):
        raise HTTPException(400, "Missing required fields")

    rewritten: str = expand(text, load_macros())
    return {"text": rewritten, "changed": rewritten != text}
