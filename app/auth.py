"""API key check shared by every /engine route."""

from fastapi import HTTPException, Header

from app.config import settings


def _bearer_token(authorization: str | None) -> str | None:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip()
    return None


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
) -> str:
    """Goal data is per-user, so a deployment with ENGINE_API_KEY set
    requires it on every evaluation request (X-API-Key or Bearer).

    Local runs without the key are open. Returns the accepted key.
    """
    expected = settings.engine_api_key
    if expected is None:
        return ""

    key = x_api_key if x_api_key is not None else _bearer_token(authorization)
    if key != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return key
