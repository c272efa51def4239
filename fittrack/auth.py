"""Request identity for tracker endpoints: optional shared API key plus the user key."""

from fastapi import HTTPException, Header

from fittrack.config import settings


def _presented_key(x_api_key: str | None, authorization: str | None) -> str | None:
    if x_api_key is not None:
        return x_api_key
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip()
    return None


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
) -> str:
    """Check the deployment's shared key (X-API-Key or Authorization: Bearer).

    With TRACKER_API_KEY unset every request passes.
    """
    expected = settings.tracker_api_key
    if expected is None:
        return ""
    key = _presented_key(x_api_key, authorization)
    if key != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return key


async def get_user_key(
    x_user_key: str = Header(..., alias="X-User-Key", min_length=1),
) -> str:
    """Opaque identifier of the signed-in user; every stored key is scoped by it."""
    key = x_user_key.strip()
    if not key or ":" in key:
        raise HTTPException(status_code=422, detail="X-User-Key must be a non-empty id without ':'")
    return key
