"""Google Fit steps provider.

Authorization is two-phase: `begin_authorization()` returns the consent URL
(PKCE S256, verifier kept in the user's store) and
`complete_authorization(code)` swaps the returned code for tokens. The stored
credential is private to this module.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from datetime import datetime, time, timedelta, timezone
from urllib.parse import urlencode
from zoneinfo import ZoneInfo

import httpx
from loguru import logger
from pydantic import BaseModel

from fittrack.tracker.context import TrackerContext
from fittrack.tracker.steps import (
    StepsAuthorizationError,
    StepsNetworkError,
    StepsProviderError,
    StepsUnauthenticatedError,
)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"
AGGREGATE_URL = "https://www.googleapis.com/fitness/v1/users/me/dataset:aggregate"
SCOPES = "https://www.googleapis.com/auth/fitness.activity.read"
STEP_DATA_TYPE = "com.google.step_count.delta"
STEP_DATA_SOURCE = "derived:com.google.step_count.delta:com.google.android.gms:aggregated"

CREDENTIAL_TABLE = "google_fit"
VERIFIER_TABLE = "google_fit_verifier"


class GoogleFitCredential(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime
    scope: str = ""

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


def _code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def _error_status(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("status")
    return error if isinstance(error, str) else None


def _error_description(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or "Unknown error"
    if isinstance(body, dict):
        return str(body.get("error_description") or body.get("error") or "Unknown error")
    return "Unknown error"


def _token_payload(resp: httpx.Response) -> dict:
    """Decoded token response. ValueError when it is not JSON or lacks an access token."""
    data = resp.json()
    if not isinstance(data, dict) or not data.get("access_token"):
        raise ValueError("token response carries no access_token")
    return data


def parse_step_total(payload: dict) -> int:
    """Sum every step point in an aggregate response. Empty responses give 0."""
    total = 0
    for bucket in payload.get("bucket") or []:
        for dataset in bucket.get("dataset") or []:
            for point in dataset.get("point") or []:
                for value in point.get("value") or []:
                    total += int(value.get("intVal") or 0)
    return total


class GoogleFitStepsProvider:
    def __init__(self, ctx: TrackerContext, client: httpx.AsyncClient):
        self._ctx = ctx
        self._client = client
        self._client_id = ctx.settings.google_fit_client_id
        self._redirect_uri = ctx.settings.google_fit_redirect_uri

    # -- credential storage ---------------------------------------------------

    async def _credential(self) -> GoogleFitCredential | None:
        raw = await self._ctx.store.get(CREDENTIAL_TABLE)
        return GoogleFitCredential.model_validate(raw) if raw else None

    async def _save_credential(self, credential: GoogleFitCredential) -> None:
        await self._ctx.store.set(CREDENTIAL_TABLE, credential.model_dump(mode="json"))

    def _require_client_id(self) -> str:
        if not self._client_id:
            raise StepsAuthorizationError("Google Fit client id is not configured.")
        return self._client_id

    def _credential_from_token_response(
        self, data: dict, refresh_token: str | None = None
    ) -> GoogleFitCredential:
        return GoogleFitCredential(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or refresh_token,
            expires_at=self._ctx.now() + timedelta(seconds=int(data.get("expires_in", 3600))),
            scope=data.get("scope", ""),
        )

    # -- authorization ----------------------------------------------------------

    async def begin_authorization(self) -> str:
        """Return the consent-screen URL to send the user to."""
        client_id = self._require_client_id()
        verifier = secrets.token_urlsafe(32)
        await self._ctx.store.set(VERIFIER_TABLE, verifier)
        params = {
            "client_id": client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": SCOPES,
            "access_type": "offline",
            "prompt": "consent",
            "code_challenge": _code_challenge(verifier),
            "code_challenge_method": "S256",
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    async def complete_authorization(self, code: str) -> GoogleFitCredential:
        client_id = self._require_client_id()
        verifier = await self._ctx.store.get(VERIFIER_TABLE)
        if not verifier:
            raise StepsAuthorizationError("No pending authorization; start the connection again.")

        try:
            resp = await self._client.post(
                TOKEN_URL,
                data={
                    "code": code,
                    "client_id": client_id,
                    "redirect_uri": self._redirect_uri,
                    "grant_type": "authorization_code",
                    "code_verifier": verifier,
                },
            )
        except httpx.TransportError as e:
            raise StepsAuthorizationError(f"Could not reach Google: {e}") from e

        if resp.is_error:
            raise StepsAuthorizationError(f"Failed to exchange code for token: {_error_description(resp)}")

        try:
            credential = self._credential_from_token_response(_token_payload(resp))
        except (ValueError, TypeError) as e:
            raise StepsAuthorizationError(f"Unexpected token response from Google: {e}") from e
        await self._save_credential(credential)
        await self._ctx.store.delete(VERIFIER_TABLE)
        logger.info(f"Google Fit connected for {self._ctx.user_key}")
        return credential

    async def _refresh(self, credential: GoogleFitCredential) -> GoogleFitCredential:
        if not credential.refresh_token:
            raise StepsUnauthenticatedError("Session expired and no refresh token available.")
        logger.info(f"Refreshing Google Fit access token for {self._ctx.user_key}")
        try:
            resp = await self._client.post(
                TOKEN_URL,
                data={
                    "client_id": self._require_client_id(),
                    "refresh_token": credential.refresh_token,
                    "grant_type": "refresh_token",
                },
            )
        except httpx.TransportError as e:
            raise StepsNetworkError(f"Token refresh failed: {e}") from e
        if resp.is_error:
            raise StepsUnauthenticatedError(f"Failed to refresh token: {_error_description(resp)}")

        try:
            refreshed = self._credential_from_token_response(_token_payload(resp), credential.refresh_token)
        except (ValueError, TypeError) as e:
            raise StepsProviderError(f"Unexpected token refresh response: {e}") from e
        await self._save_credential(refreshed)
        return refreshed

    # -- StepsProvider ------------------------------------------------------------

    async def is_connected(self) -> bool:
        return await self._credential() is not None

    async def fetch_today_steps(self) -> int:
        credential = await self._credential()
        if credential is None:
            raise StepsUnauthenticatedError("Google Fit is not connected.")
        if credential.is_expired(self._ctx.now()):
            credential = await self._refresh(credential)

        tz = ZoneInfo(self._ctx.settings.default_tz)
        start = datetime.combine(self._ctx.today(), time.min, tzinfo=tz)
        end = self._ctx.now()
        body = {
            "aggregateBy": [{"dataTypeName": STEP_DATA_TYPE, "dataSourceId": STEP_DATA_SOURCE}],
            "bucketByTime": {"durationMillis": 86_400_000},
            "startTimeMillis": int(start.astimezone(timezone.utc).timestamp() * 1000),
            "endTimeMillis": int(end.timestamp() * 1000),
        }

        try:
            resp = await self._client.post(
                AGGREGATE_URL,
                json=body,
                headers={"Authorization": f"Bearer {credential.access_token}"},
            )
        except httpx.TransportError as e:
            raise StepsNetworkError(f"Failed to reach Google Fit: {e}") from e

        if resp.status_code == 401 or _error_status(resp) == "UNAUTHENTICATED":
            raise StepsUnauthenticatedError("Token is invalid or expired.")
        if resp.is_error:
            raise StepsProviderError(f"Failed to fetch step count from Google Fit ({resp.status_code}).")

        try:
            return parse_step_total(resp.json())
        except (ValueError, TypeError, AttributeError) as e:
            raise StepsProviderError(f"Unexpected step count response from Google Fit: {e}") from e

    async def disconnect(self) -> None:
        """Revoke the token (best effort) and forget the credential."""
        credential = await self._credential()
        if credential is None:
            return
        try:
            await self._client.post(REVOKE_URL, params={"token": credential.access_token})
        except httpx.HTTPError as e:
            logger.error(f"Error revoking Google Fit token: {e}")
        await self._ctx.store.delete(CREDENTIAL_TABLE)
        logger.warning(f"Google Fit disconnected for {self._ctx.user_key}")
