"""Azure AD bearer token validation with a per-tenant JWKS cache."""

from __future__ import annotations

import logging
import time
from typing import Any

import aiohttp
from fastapi import HTTPException, status
from jose import jwk, jwt
from jose.constants import Algorithms
from jose.exceptions import ExpiredSignatureError, JWSSignatureError, JWTClaimsError, JWTError

logger = logging.getLogger("azure_auth")

_JWKS_TTL_SECONDS = 24 * 60 * 60
_EMAIL_CLAIMS = ("preferred_username", "upn", "email")

# tenant id -> (fetched at, key set)
_jwks_cache: dict[str, tuple[float, dict[str, Any]]] = {}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_jwks(tenant_id: str) -> dict[str, Any]:
    cached = _jwks_cache.get(tenant_id)
    now = time.time()
    if cached and now - cached[0] < _JWKS_TTL_SECONDS:
        return cached[1]

    jwks_uri = f"https://login.microsoftonline.com/{tenant_id}/discovery/v2.0/keys"
    logger.info("Fetching JWKS from %s", jwks_uri)

    timeout = aiohttp.ClientTimeout(total=15)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(jwks_uri) as response:
                response.raise_for_status()
                jwks = await response.json()
    except (aiohttp.ClientError, TimeoutError) as e:
        logger.error("Failed to fetch JWKS: %s", e)
        if cached:
            logger.warning("Using expired JWKS from cache for tenant %s", tenant_id)
            return cached[1]
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not fetch JWKS: {e}",
        ) from e

    _jwks_cache[tenant_id] = (now, jwks)
    return jwks


async def get_signing_key(token: str, tenant_id: str) -> dict[str, str]:
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise _unauthorized(f"Invalid token header: {e}") from e

    kid = header.get("kid")
    if not kid:
        raise _unauthorized("Token has no 'kid' in header")

    jwks = await get_jwks(tenant_id)
    key = next((k for k in jwks.get("keys", []) if k.get("kid") == kid), None)
    if key is None:
        raise _unauthorized(f"No matching signing key for kid: {kid}")
    return key


async def validate_token(token: str, tenant_id: str, client_id: str) -> dict[str, Any]:
    """Decode a v1 or v2 Azure AD access token issued for this API."""
    if not tenant_id or not client_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing Azure AD configuration",
        )

    signing_key = await get_signing_key(token, tenant_id)
    algorithm = signing_key.get("alg", Algorithms.RS256)
    public_key = jwk.construct(signing_key, algorithm=algorithm)

    issuers = [
        f"https://login.microsoftonline.com/{tenant_id}/v2.0",
        f"https://sts.windows.net/{tenant_id}/",
    ]
    audiences = [client_id, f"api://{client_id}"]
    options = {"require_exp": True, "require_iss": True, "require_aud": True}

    last_error: Exception | None = None
    for issuer in issuers:
        for audience in audiences:
            try:
                return jwt.decode(
                    token,
                    public_key,
                    algorithms=[algorithm],
                    audience=audience,
                    issuer=issuer,
                    options=options,
                )
            except ExpiredSignatureError as e:
                raise _unauthorized("Token is expired") from e
            except JWSSignatureError as e:
                raise _unauthorized("Invalid token signature") from e
            except (JWTClaimsError, JWTError) as e:
                last_error = e

    message = str(last_error).lower()
    if isinstance(last_error, JWTClaimsError) and "audience" in message:
        raise _unauthorized(f"Invalid token audience. Expected one of: {audiences}")
    if isinstance(last_error, JWTClaimsError) and "issuer" in message:
        raise _unauthorized(f"Invalid token issuer. Expected one of: {issuers}")
    raise _unauthorized("Invalid authentication credentials")


def extract_roles_from_token(payload: dict[str, Any]) -> list[str]:
    roles = payload.get("roles", [])
    if not isinstance(roles, list):
        return []
    return [str(r) for r in roles if isinstance(r, str | int)]


def extract_email_from_token(payload: dict[str, Any]) -> str | None:
    for claim in _EMAIL_CLAIMS:
        value = payload.get(claim)
        if isinstance(value, str) and value:
            return value.lower()
    return None
