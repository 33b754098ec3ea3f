"""Bearer-token gate for observers and the HTTP API.

An empty token disables auth (dev mode).
"""

import hmac

from fastapi import HTTPException, Request

WS_UNAUTHORIZED = 4001


def token_matches(expected: str, provided: str | None) -> bool:
    if not expected:
        return True
    if provided is None:
        return False
    return hmac.compare_digest(expected.encode(), provided.encode())


def bearer_guard(expected: str):
    """Build a FastAPI dependency that enforces `Authorization: Bearer <token>`."""

    def _guard(request: Request) -> None:
        if not expected:
            return
        header = request.headers.get("authorization", "")
        if not header.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Missing Authorization header")
        if not token_matches(expected, header[7:]):
            raise HTTPException(status_code=403, detail="Invalid token")

    return _guard
