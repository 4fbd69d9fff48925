"""
JWT verification for the external identity provider.
Expect Authorization: Bearer <access_token>.
Set AUTH_JWT_SECRET for HS256 tokens, or AUTH_JWKS_URL for RS256 tokens signed by a JWKS.
Optional AUTH_JWT_AUDIENCE / AUTH_JWT_ISSUER are enforced when set.
The token's sub claim is the owner id every row is scoped to.
"""
from __future__ import annotations

import logging
import os
from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class AuthClaims(BaseModel):
    sub: str  # owner id
    email: Optional[str] = None
    role: Optional[str] = None


def _decode(token: str) -> dict:
    audience = os.environ.get("AUTH_JWT_AUDIENCE") or None
    issuer = os.environ.get("AUTH_JWT_ISSUER") or None
    options = {"verify_aud": audience is not None, "require": ["sub", "exp"]}

    jwks_url = os.environ.get("AUTH_JWKS_URL")
    if jwks_url:
        jwks_client = jwt.PyJWKClient(jwks_url)
        signing_key = jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256", "ES256"],
            audience=audience,
            issuer=issuer,
            options=options,
        )

    secret = os.environ.get("AUTH_JWT_SECRET")
    if not secret:
        raise HTTPException(status_code=503, detail="AUTH_JWT_SECRET not set")
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        audience=audience,
        issuer=issuer,
        options=options,
    )


def verify_token(token: str) -> AuthClaims:
    """Verify a bearer token and return its claims."""
    try:
        payload = _decode(token)
    except jwt.InvalidTokenError as e:
        logger.info("[auth] rejected token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid token")
    sub = str(payload.get("sub") or "").strip()
    if not sub:
        raise HTTPException(status_code=401, detail="Invalid token")
    return AuthClaims(sub=sub, email=payload.get("email"), role=payload.get("role"))


def get_optional_claims(
    creds: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[AuthClaims]:
    if not creds or not creds.credentials:
        return None
    return verify_token(creds.credentials)


def require_auth(
    claims: Annotated[Optional[AuthClaims], Depends(get_optional_claims)],
) -> AuthClaims:
    if not claims:
        raise HTTPException(status_code=401, detail="No authenticated user")
    return claims
