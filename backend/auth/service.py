import base64
import logging
import secrets
import string
import urllib.parse
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from settings import Settings
from .schemas import TokenPair


logger = logging.getLogger(__name__)

STATE_KEY = "spotify_auth_state" # Cookie holding the CSRF nonce between /login and /callback
STATE_LENGTH = 16
STATE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits


class TokenEndpointError(Exception):
    """The provider's token endpoint could not produce a usable token."""


class TokenEndpointTimeout(TokenEndpointError):
    """The token endpoint did not answer within the configured timeout."""


def generate_random_string(length: int) -> str:
    """Return `length` characters drawn independently from the alphanumeric alphabet."""
    if length < 1:
        raise ValueError("length must be at least 1")
    return "".join(secrets.choice(STATE_ALPHABET) for _ in range(length))


def encode_query(params: Dict[str, Any]) -> str:
    """Percent-encode query parameters, skipping values that are None."""
    present = {key: value for key, value in params.items() if value is not None}
    return urllib.parse.urlencode(present, quote_via=urllib.parse.quote)


def build_authorization_url(settings: Settings, state: str) -> str:
    params = {
        "response_type": "code",
        "client_id": settings.client_id,
        "scope": settings.scope,
        "redirect_uri": settings.redirect_uri,
        "state": state,
    }
    return f"{settings.authorize_url}?{encode_query(params)}"


def frontend_error_url(settings: Settings, error: str) -> str:
    return f"{settings.frontend_uri.rstrip('/')}/#{encode_query({'error': error})}"


def frontend_token_url(settings: Settings, tokens: TokenPair) -> str:
    params = {
        "access_token": tokens.access_token,
        "expires_in": tokens.expires_in,
        "refresh_token": tokens.refresh_token,
    }
    return f"{settings.frontend_uri}?{encode_query(params)}"


def basic_auth_header(settings: Settings) -> str:
    credentials = f"{settings.client_id}:{settings.client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


async def request_token(
    settings: Settings,
    data: Dict[str, str],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TokenPair:
    """POST a grant to the provider's token endpoint and parse the token payload.

    Inputs:
        settings (Settings): Relay configuration with client credentials and token URL.
        data (Dict[str, str]): Form fields describing the grant.
        transport (httpx.AsyncBaseTransport | None): Optional transport override.
    Outputs:
        TokenPair: Tokens issued by the provider.
    """
    headers = {
        "Authorization": basic_auth_header(settings),
        "Accept": "application/json",
    }
    grant_type = data.get("grant_type")
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout, transport=transport) as client:
            response = await client.post(settings.token_url, data=data, headers=headers)
    except httpx.TimeoutException as exc:
        logger.warning("Token endpoint timed out (grant_type=%s)", grant_type)
        raise TokenEndpointTimeout("Timed out waiting for Spotify token endpoint") from exc
    except httpx.HTTPError as exc:
        logger.warning("Token endpoint unreachable (grant_type=%s): %s", grant_type, exc)
        raise TokenEndpointError("Failed to reach Spotify token endpoint") from exc
    if response.status_code != 200:
        logger.warning(
            "Token endpoint rejected grant_type=%s with status %s", grant_type, response.status_code
        )
        raise TokenEndpointError(f"Spotify token endpoint returned status {response.status_code}")
    try:
        return TokenPair.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        logger.warning("Token endpoint returned an unusable body (grant_type=%s)", grant_type)
        raise TokenEndpointError("Unexpected response from Spotify token endpoint") from exc


async def exchange_code_for_tokens(
    settings: Settings,
    code: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TokenPair:
    """Trade an authorization code for an access/refresh token pair."""
    data = {
        "code": code,
        "redirect_uri": settings.redirect_uri,
        "grant_type": "authorization_code",
    }
    return await request_token(settings, data, transport=transport)


async def refresh_access_token(
    settings: Settings,
    refresh_token: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Trade a refresh token for a fresh access token.

    The provider may rotate the refresh token; the new one is not passed on and
    the caller keeps using the original.
    """
    data = {"grant_type": "refresh_token", "refresh_token": refresh_token}
    tokens = await request_token(settings, data, transport=transport)
    return tokens.access_token
