"""
Authorization gate and code exchange for the Cognito hosted UI login.
The gate runs on every page load; /auth exchanges ?code=... for tokens and stores them as cookies.
The id token is not verified here: the identity pool verifies it when it is exchanged for credentials.
"""
import logging
import time
from dataclasses import dataclass
from urllib.parse import parse_qs

import httpx
import jwt

from client_web import config
from client_web.cookie_store import ID_TOKEN, REFRESH_TOKEN, CookieStore
from client_web.hosted_ui import build_token_request_body
from client_web.navigation import Redirect

logger = logging.getLogger(__name__)


def decode_jwt_payload(token: str) -> dict:
    """
    Claims of a JWT without verifying it. Raises jwt.DecodeError if the token is malformed.
    exp is checked separately by is_expired.
    """
    return jwt.decode(token, options={"verify_signature": False, "verify_exp": False})


def is_expired(payload: dict, now_ms: int | None = None) -> bool:
    """exp is seconds since epoch; compare in milliseconds."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return payload["exp"] * 1000 < now_ms


def is_authorized(path: str, cookies: CookieStore, now_ms: int | None = None) -> bool:
    """True if the current page may be shown without logging in first."""
    if path == config.CALLBACK_PATH:
        # mid-handshake: /auth is where the code arrives
        return True

    id_token = cookies.get(ID_TOKEN)
    if not id_token:
        logger.warning("No cookie")
        return False

    try:
        payload = decode_jwt_payload(id_token)
        expired = is_expired(payload, now_ms)
    except (jwt.PyJWTError, KeyError, TypeError) as e:
        logger.warning("Invalid id_token cookie: %s", e)
        return False
    if expired:
        logger.warning("Expired Token")
        return False

    return True


def authorization_gate(path: str, cookies: CookieStore, now_ms: int | None = None) -> Redirect | None:
    """Redirect to the hosted login page when the session is not authorized."""
    if is_authorized(path, cookies, now_ms):
        return None
    return Redirect(config.LOGIN_URL)


@dataclass(frozen=True)
class TokenResponse:
    id_token: str
    refresh_token: str
    expires_in: int
    token_type: str

    @classmethod
    def from_json(cls, data: dict) -> "TokenResponse":
        """Raises ValueError unless both tokens are non-empty strings and expires_in is a positive int."""
        if not isinstance(data, dict):
            raise ValueError("token response is not a JSON object")
        for name in ("id_token", "refresh_token"):
            value = data.get(name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"{name} missing or not a string")
        expires_in = data.get("expires_in")
        # bool is an int subclass
        if not isinstance(expires_in, int) or isinstance(expires_in, bool) or expires_in <= 0:
            raise ValueError("expires_in missing or not a positive integer")
        return cls(
            id_token=data["id_token"],
            refresh_token=data["refresh_token"],
            expires_in=expires_in,
            token_type=data.get("token_type") or "",
        )


def extract_code(query: str) -> str | None:
    """The `code` parameter of the callback query string, if any."""
    if not query:
        return None
    codes = parse_qs(query).get("code")
    return codes[0] if codes else None


def exchange_code(code: str) -> TokenResponse | None:
    """
    POST the authorization code to the token endpoint. Returns None on any failure
    (network error, non-2xx, unexpected body); failures are logged, never retried.
    """
    body = build_token_request_body(
        code=code,
        client_id=config.COGNITO_CLIENT_ID,
        redirect_uri=config.CALLBACK_URI,
    )
    try:
        r = httpx.post(
            config.TOKEN_ENDPOINT,
            data=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=config.HTTP_TIMEOUT,
        )
    except httpx.HTTPError as e:
        logger.error("Token request failed: %s", e)
        return None

    if not r.is_success:
        logger.error("Token endpoint returned %s: %s", r.status_code, r.text[:500])
        return None

    try:
        return TokenResponse.from_json(r.json())
    except (ValueError, KeyError, TypeError) as e:
        logger.error("Unexpected token response: %s", e)
        return None


def authorize(query: str, cookies: CookieStore) -> Redirect | None:
    """
    Handle the hosted UI callback. No code -> back to login.
    Success -> id_token/refresh_token cookies (max-age = expires_in) and navigate to the upload view.
    Token endpoint failure -> None; the caller stays on the callback page.
    """
    code = extract_code(query)
    if not code:
        logger.warning("Not auth.")
        return Redirect(config.LOGIN_URL)

    tokens = exchange_code(code)
    if tokens is None:
        return None

    logger.info("Token exchange succeeded (token_type=%s, expires_in=%s)", tokens.token_type, tokens.expires_in)
    cookies.set(ID_TOKEN, tokens.id_token, max_age=tokens.expires_in)
    cookies.set(REFRESH_TOKEN, tokens.refresh_token, max_age=tokens.expires_in)
    return Redirect(config.UPLOAD_URL)


def get_token(cookies: CookieStore) -> str:
    """Current id token, or "" when there is none (the credentials exchange then fails)."""
    return cookies.get(ID_TOKEN) or ""
