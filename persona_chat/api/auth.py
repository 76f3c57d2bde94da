"""
Bearer-token authentication for the API.

Tokens are RS256 JWTs issued by `https://{AUTH_DOMAIN}/` for the
`AUTH_AUDIENCE` audience; signing keys come from the issuer's JWKS
endpoint. When `AUTH_DOMAIN` is not configured, authentication is off
and `get_current_subject` returns None.
"""
import asyncio
import logging
from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from persona_chat.settings import settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@lru_cache(maxsize=4)
def get_jwks_client(domain: str) -> jwt.PyJWKClient:
    return jwt.PyJWKClient(f'https://{domain}/.well-known/jwks.json')


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={'WWW-Authenticate': 'Bearer'},
    )


def decode_token(token: str, *, jwks_client, domain: str, audience: Optional[str]) -> dict:
    try:
        signing_key = jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=['RS256'],
            audience=audience,
            issuer=f'https://{domain}/',
            options={'require': ['exp', 'iss', 'sub']},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized('Token has expired')
    except (jwt.InvalidTokenError, jwt.PyJWKClientError) as e:
        logger.info('[auth] rejected token: %s', e)
        raise _unauthorized(f'Invalid token: {e}')


async def get_current_subject(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    if not settings.auth_enabled:
        return None

    if credentials is None or not credentials.credentials:
        raise _unauthorized('Not authenticated')

    # PyJWKClient fetches the JWKS with blocking urllib calls
    claims = await asyncio.to_thread(
        decode_token,
        credentials.credentials,
        jwks_client=get_jwks_client(settings.AUTH_DOMAIN),
        domain=settings.AUTH_DOMAIN,
        audience=settings.AUTH_AUDIENCE,
    )
    return claims['sub']
