"""Bearer token verification and caller identity.

Provides the FastAPI dependency ``get_current_profile`` that resolves the
caller to a local ``Profile``:

* With ``settings.auth_enabled`` the ``Authorization: Bearer <token>``
  header is verified against the issuer's JWKS (python-jose). The ``sub``
  claim is the identity; a profile is auto-provisioned on first sight,
  which also seeds the default pipeline and channels.
* With auth disabled, the identity comes from the ``X-User-Id`` header,
  falling back to ``settings.default_user_id``.

Implementation notes:
* JWKS are fetched from https://<domain>/.well-known/jwks.json and cached.
* Only RS256-signed access tokens are expected by default.
"""
from __future__ import annotations

import time
import uuid
import httpx
from functools import lru_cache
from typing import Any, Optional
from jose import jwt, jwk
from jose.utils import base64url_decode
from fastapi import Depends, HTTPException, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.core.config import get_settings
from creatorflow.db.session import get_db
from creatorflow.models.profile import Profile
from creatorflow.services.profile import provision_profile


class JWKSCache:
    def __init__(self, ttl_seconds: int) -> None:
        self._ttl = ttl_seconds
        self._expires_at = 0.0
        self._jwks: dict[str, Any] | None = None

    async def get(self, domain: str) -> dict[str, Any]:
        now = time.time()
        if self._jwks and now < self._expires_at:
            return self._jwks
        url = f"https://{domain.rstrip('/')}/.well-known/jwks.json"
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.get(url)
            if resp.status_code != 200:
                raise RuntimeError(f"Failed to fetch JWKS: {resp.status_code}")
            data = resp.json()
        self._jwks = data
        self._expires_at = now + self._ttl
        return data


@lru_cache
def _jwks_cache(ttl: int) -> JWKSCache:
    return JWKSCache(ttl)


async def verify_token(token: str, settings) -> dict[str, Any]:
    if not settings.auth_domain or not settings.auth_api_audience:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Auth not configured")
    if token.count('.') != 2:
        raise HTTPException(status_code=401, detail="Malformed bearer token")
    # auth_issuer is https://<host>/
    domain = settings.auth_issuer[len("https://"):].rstrip('/')
    jwks = await _jwks_cache(settings.auth_jwks_cache_ttl_seconds).get(domain)
    kid = jwt.get_unverified_header(token).get("kid")
    if not kid:
        raise HTTPException(status_code=401, detail="Missing kid header")
    key = next((k for k in jwks.get("keys", []) if k.get("kid") == kid), None)
    if not key:
        raise HTTPException(status_code=401, detail="Unknown kid")
    message, encoded_signature = token.rsplit('.', 1)
    if not jwk.construct(key).verify(message.encode(), base64url_decode(encoded_signature.encode())):
        raise HTTPException(status_code=401, detail="Invalid signature")
    return jwt.decode(
        token,
        key,
        algorithms=settings.auth_algorithms,
        audience=settings.auth_api_audience,
        issuer=settings.auth_issuer,
    )


def identity_from_claims(claims: dict[str, Any]) -> tuple[uuid.UUID, str]:
    """(profile id, display name) for verified token claims."""
    subject = claims.get("sub")
    if not subject:
        raise HTTPException(status_code=401, detail="Missing sub claim")
    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        # non-UUID subjects map onto a stable UUIDv5
        user_id = uuid.uuid5(uuid.NAMESPACE_URL, f"identity:{subject}")
    metadata = claims.get("user_metadata") or {}
    display_name = metadata.get("display_name") or claims.get("name") or claims.get("email") or ""
    return user_id, display_name


async def get_current_profile(
    authorization: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
    session: AsyncSession = Depends(get_db),
    settings=Depends(get_settings),
) -> Profile:
    """Resolve (and on first use provision) the caller's profile."""
    if settings.auth_enabled:
        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Missing bearer token")
        token = authorization[len("Bearer "):].strip()
        try:
            claims = await verify_token(token, settings)
        except HTTPException:
            raise
        except Exception as e:  # jose / httpx errors
            raise HTTPException(status_code=401, detail="Token verification failed") from e
        user_id, display_name = identity_from_claims(claims)
    else:
        try:
            user_id = uuid.UUID(x_user_id) if x_user_id else settings.default_user_id
        except ValueError:
            raise HTTPException(status_code=400, detail="X-User-Id must be a UUID")
        display_name = settings.default_display_name

    profile = await provision_profile(session, user_id, display_name=display_name)
    await session.commit()
    return profile


def bearer_token(authorization: Optional[str] = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return authorization[len("Bearer "):].strip()


__all__ = ["get_current_profile", "verify_token", "identity_from_claims", "bearer_token"]
