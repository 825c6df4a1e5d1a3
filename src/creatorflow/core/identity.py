"""Client for the external identity service (GoTrue-compatible REST API).

CreatorFlow never stores credentials; it only forwards them and keeps the
resulting session (access token + user id). Every failure, whether the
service said no or could not be reached, surfaces as ``IdentityError``.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Any, Optional

import httpx

from creatorflow.core.config import get_settings
from creatorflow.core.errors import IdentityError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentitySession:
    user_id: uuid.UUID
    email: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    display_name: Optional[str] = None


def _session_from_payload(payload: dict[str, Any]) -> IdentitySession:
    # sign-in returns {access_token, user: {...}}; sign-up may return the bare user
    user = payload.get("user") or payload
    try:
        user_id = uuid.UUID(str(user["id"]))
    except (KeyError, ValueError) as e:
        raise IdentityError("identity service returned no user id") from e
    metadata = user.get("user_metadata") or {}
    return IdentitySession(
        user_id=user_id,
        email=user.get("email"),
        access_token=payload.get("access_token"),
        refresh_token=payload.get("refresh_token"),
        display_name=metadata.get("display_name"),
    )


class IdentityClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.identity_base_url).rstrip("/")
        if api_key is None and settings.identity_api_key is not None:
            api_key = settings.identity_api_key.get_secret_value()
        self.api_key = api_key
        self.timeout = timeout if timeout is not None else settings.identity_timeout_seconds
        self._transport = transport

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}/auth/v1{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(
                    method, url, json=json, params=params, headers=self._headers(access_token)
                )
        except httpx.HTTPError as e:
            log.error("identity service unreachable", extra={"path": path, "error": repr(e)})
            raise IdentityError("identity service unreachable") from e
        if resp.status_code >= 400:
            try:
                body = resp.json()
                message = body.get("msg") or body.get("error_description") or body.get("message") or resp.text
            except (ValueError, AttributeError):
                message = resp.text
            raise IdentityError(message or f"identity request failed ({resp.status_code})", resp.status_code)
        if not resp.content:
            return {}
        return resp.json()

    async def sign_up(self, email: str, password: str, display_name: str) -> IdentitySession:
        payload = await self._request(
            "POST",
            "/signup",
            json={"email": email, "password": password, "data": {"display_name": display_name}},
        )
        session = _session_from_payload(payload)
        if session.display_name is None:
            session = replace(session, display_name=display_name)
        return session

    async def sign_in(self, email: str, password: str) -> IdentitySession:
        payload = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return _session_from_payload(payload)

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "/logout", access_token=access_token)

    async def update_password(self, access_token: str, password: str) -> None:
        await self._request("PUT", "/user", json={"password": password}, access_token=access_token)
