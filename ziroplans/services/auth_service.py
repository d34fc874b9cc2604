# ------------------------------------------------------------------
# 🔐 Identity Provider: Clerk bearer JWT -> user id
# ------------------------------------------------------------------
import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

import httpx
from jose import jwt
from jose.exceptions import JOSEError

from ziroplans.config import settings
from ziroplans.errors import AuthenticationError

logger = logging.getLogger(__name__)

JWKS_TIMEOUT_SECONDS = 10.0

# kid -> JWK, filled on first verification and reused for the process lifetime
_jwks_cache: Dict[str, Dict[str, Any]] = {}


def clerk_domain(publishable_key: str) -> str:
    """
    Clerk publishable keys look like pk_test_<base64 frontend domain>$.
    Returns "" when the key cannot be decoded.
    """
    parts = (publishable_key or "").split("_")
    if len(parts) < 3:
        return ""
    encoded = "_".join(parts[2:])
    encoded += "=" * (-len(encoded) % 4)
    try:
        decoded = base64.b64decode(encoded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return ""
    return decoded.rstrip("$")


def jwks_url() -> str:
    if settings.CLERK_JWKS_URL:
        return settings.CLERK_JWKS_URL
    domain = clerk_domain(settings.CLERK_PUBLISHABLE_KEY)
    return f"https://{domain}/.well-known/jwks.json" if domain else ""


async def _fetch_jwks(client: Optional[httpx.AsyncClient] = None) -> List[Dict[str, Any]]:
    url = jwks_url()
    if not url:
        logger.warning("No Clerk JWKS URL configured; bearer tokens cannot be verified")
        return []

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=JWKS_TIMEOUT_SECONDS)
    try:
        response = await client.get(url)
        response.raise_for_status()
        body = response.json()
    except ValueError:
        logger.warning("Clerk JWKS endpoint %s did not return JSON", url)
        return []
    finally:
        if owns_client:
            await client.aclose()

    keys = body.get("keys") if isinstance(body, dict) else None
    if not isinstance(keys, list):
        logger.warning("Clerk JWKS response from %s has no key list", url)
        return []
    return [key for key in keys if isinstance(key, dict)]


async def _signing_key(kid: str, client: Optional[httpx.AsyncClient] = None) -> Optional[Dict[str, Any]]:
    if kid not in _jwks_cache:
        # unknown kid may mean the keys rotated
        for key in await _fetch_jwks(client):
            if key.get("kid"):
                _jwks_cache[key["kid"]] = key
    return _jwks_cache.get(kid)


async def verify_token(token: str, client: Optional[httpx.AsyncClient] = None) -> Optional[Dict[str, Any]]:
    """Verified RS256 claims, or None for any malformed, unknown-key, bad-signature or expired token."""
    try:
        header = jwt.get_unverified_header(token)
        kid = header.get("kid")
        if not kid:
            return None
        key = await _signing_key(kid, client)
        if key is None:
            return None
        return jwt.decode(token, key, algorithms=["RS256"], options={"verify_aud": False})
    except JOSEError as e:
        logger.info("JWT verification failed: %s", e)
        return None
    except httpx.HTTPError as e:
        logger.warning("Could not fetch Clerk JWKS: %s", e)
        return None


async def authenticate(authorization: Optional[str], client: Optional[httpx.AsyncClient] = None) -> Optional[str]:
    """`Authorization: Bearer <jwt>` -> the token's `sub`, or None."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    claims = await verify_token(authorization[len("Bearer "):].strip(), client)
    return (claims or {}).get("sub") or None


async def resolve_user_id(authorization: Optional[str], client: Optional[httpx.AsyncClient] = None) -> str:
    """
    Authenticated user id, or ANONYMOUS_USER_ID when ALLOW_ANONYMOUS is on.
    With ALLOW_ANONYMOUS off, a missing or invalid token is a 401.
    """
    user_id = await authenticate(authorization, client)
    if user_id:
        return user_id
    if settings.ALLOW_ANONYMOUS:
        return settings.ANONYMOUS_USER_ID
    raise AuthenticationError("A valid bearer token is required")
