import threading
import time
from types import SimpleNamespace

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from persona_chat.api import auth
from persona_chat.api.auth import decode_token, get_current_subject

DOMAIN = 'tenant.example.com'
AUDIENCE = 'https://api.persona-chat'


@pytest.fixture(scope='module')
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def jwks_client(private_key):
    signing_key = SimpleNamespace(key=private_key.public_key())
    return SimpleNamespace(get_signing_key_from_jwt=lambda token: signing_key)


def _token(private_key, **overrides):
    claims = {
        'sub': 'auth0|abc',
        'iss': f'https://{DOMAIN}/',
        'aud': AUDIENCE,
        'exp': int(time.time()) + 300,
    }
    claims.update(overrides)
    return jwt.encode(claims, private_key, algorithm='RS256')


def test_valid_token(private_key, jwks_client):
    claims = decode_token(_token(private_key), jwks_client=jwks_client, domain=DOMAIN, audience=AUDIENCE)
    assert claims['sub'] == 'auth0|abc'


def test_expired_token(private_key, jwks_client):
    with pytest.raises(HTTPException) as ei:
        decode_token(
            _token(private_key, exp=int(time.time()) - 60),
            jwks_client=jwks_client, domain=DOMAIN, audience=AUDIENCE,
        )
    assert ei.value.status_code == 401
    assert ei.value.detail == 'Token has expired'


@pytest.mark.parametrize(
    'overrides', [{'aud': 'someone-else'}, {'iss': 'https://evil.example.com/'}]
)
def test_wrong_audience_or_issuer(private_key, jwks_client, overrides):
    with pytest.raises(HTTPException) as ei:
        decode_token(_token(private_key, **overrides), jwks_client=jwks_client, domain=DOMAIN, audience=AUDIENCE)
    assert ei.value.status_code == 401


def test_garbage_token(jwks_client):
    def broken(token):
        raise jwt.PyJWKClientError('Unable to find a signing key')

    with pytest.raises(HTTPException) as ei:
        decode_token('not-a-jwt', jwks_client=SimpleNamespace(get_signing_key_from_jwt=broken),
                     domain=DOMAIN, audience=AUDIENCE)
    assert ei.value.status_code == 401


@pytest.mark.asyncio
async def test_auth_disabled_returns_none(monkeypatch):
    monkeypatch.setattr(auth.settings, 'AUTH_DOMAIN', None)
    assert await get_current_subject(None) is None


@pytest.mark.asyncio
async def test_auth_enabled_requires_credentials(monkeypatch):
    monkeypatch.setattr(auth.settings, 'AUTH_DOMAIN', DOMAIN)
    with pytest.raises(HTTPException) as ei:
        await get_current_subject(None)
    assert ei.value.status_code == 401


@pytest.mark.asyncio
async def test_auth_enabled_returns_subject(monkeypatch, private_key, jwks_client):
    monkeypatch.setattr(auth.settings, 'AUTH_DOMAIN', DOMAIN)
    monkeypatch.setattr(auth.settings, 'AUTH_AUDIENCE', AUDIENCE)
    monkeypatch.setattr(auth, 'get_jwks_client', lambda domain: jwks_client)

    creds = HTTPAuthorizationCredentials(scheme='Bearer', credentials=_token(private_key))
    assert await get_current_subject(creds) == 'auth0|abc'


@pytest.mark.asyncio
async def test_signing_key_lookup_runs_off_the_event_loop(monkeypatch, private_key):
    signing_key = SimpleNamespace(key=private_key.public_key())
    lookups = []

    def get_signing_key_from_jwt(token):
        lookups.append(threading.get_ident())
        return signing_key

    monkeypatch.setattr(auth.settings, 'AUTH_DOMAIN', DOMAIN)
    monkeypatch.setattr(auth.settings, 'AUTH_AUDIENCE', AUDIENCE)
    monkeypatch.setattr(
        auth, 'get_jwks_client',
        lambda domain: SimpleNamespace(get_signing_key_from_jwt=get_signing_key_from_jwt),
    )

    creds = HTTPAuthorizationCredentials(scheme='Bearer', credentials=_token(private_key))
    assert await get_current_subject(creds) == 'auth0|abc'
    assert len(lookups) == 1
    assert lookups[0] != threading.get_ident()
