"""Tests for the authorization gate and code exchange."""
import base64
import json
import logging
import time
from unittest.mock import patch

import httpx
import jwt
import pytest

from client_web import config
from client_web.auth import (
    authorization_gate,
    authorize,
    decode_jwt_payload,
    extract_code,
    get_token,
    is_authorized,
    is_expired,
)
from client_web.cookie_store import MemoryCookieStore
from client_web.navigation import Redirect


def make_id_token(exp: int, **claims) -> str:
    return jwt.encode({"exp": exp, "sub": "user-1", **claims}, "test-secret", algorithm="HS256")


def store_with(**cookies) -> MemoryCookieStore:
    store = MemoryCookieStore()
    for name, value in cookies.items():
        store.set(name, value, max_age=3600)
    return store


# base64url('{"alg":"HS256","typ":"JWT"}')
JWT_HEADER = "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9"
JWT_SIGNATURE = "c2lnbmF0dXJl"


def token_with_payload(segment: str) -> str:
    return f"{JWT_HEADER}.{segment}.{JWT_SIGNATURE}"


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


# --- payload decoding ---


def test_decode_round_trip_base64url():
    claims = {"sub": "abc", "email": "a@example.com", "name": "山田 太郎", "exp": 1700000000, "n": [1, 2]}
    segment = b64url(json.dumps(claims).encode("utf-8"))
    assert decode_jwt_payload(token_with_payload(segment)) == claims


def test_decode_payload_with_url_safe_characters():
    # encodes with "_" where standard base64 would use "/"
    claims = {"k": "??>??>"}
    segment = b64url(json.dumps(claims).encode("utf-8"))
    assert "_" in segment
    assert decode_jwt_payload(token_with_payload(segment)) == claims


def test_decode_real_jwt():
    token = make_id_token(1234567890, email="x@example.com")
    assert decode_jwt_payload(token)["email"] == "x@example.com"


def test_decode_does_not_check_signature_or_expiry():
    token = jwt.encode({"sub": "u", "exp": 1}, "some-other-key", algorithm="HS256")
    assert decode_jwt_payload(token) == {"sub": "u", "exp": 1}


@pytest.mark.parametrize(
    "token",
    [
        "",
        "onlyone",
        "a.b",
        token_with_payload("!!!"),
        token_with_payload(b64url(b"not json")),
        token_with_payload(b64url(b"[1]")),
    ],
)
def test_decode_malformed_token_raises(token):
    with pytest.raises(jwt.DecodeError):
        decode_jwt_payload(token)


# --- expiry ---


def test_is_expired_compares_milliseconds():
    assert is_expired({"exp": 100}, now_ms=100_001) is True
    assert is_expired({"exp": 100}, now_ms=100_000) is False
    assert is_expired({"exp": 100}, now_ms=99_999) is False


def test_is_expired_defaults_to_current_time():
    assert is_expired({"exp": int(time.time()) - 10}) is True
    assert is_expired({"exp": int(time.time()) + 600}) is False


# --- gate ---


def test_gate_callback_path_allowed_without_cookie():
    assert is_authorized(config.CALLBACK_PATH, MemoryCookieStore()) is True
    assert authorization_gate(config.CALLBACK_PATH, MemoryCookieStore()) is None


def test_gate_no_cookie_unauthorized(caplog):
    with caplog.at_level(logging.WARNING, logger="client_web.auth"):
        assert is_authorized("/upload", MemoryCookieStore()) is False
    assert "No cookie" in caplog.text


def test_gate_refresh_token_alone_is_not_enough():
    assert is_authorized("/upload", store_with(refresh_token="rt")) is False


def test_gate_expired_token_unauthorized(caplog):
    now_ms = 2_000_000_000_000
    token = make_id_token(exp=now_ms // 1000 - 1)
    with caplog.at_level(logging.WARNING, logger="client_web.auth"):
        assert is_authorized("/", store_with(id_token=token), now_ms=now_ms) is False
    assert "Expired Token" in caplog.text


def test_gate_valid_token_authorized():
    token = make_id_token(exp=int(time.time()) + 3600)
    assert is_authorized("/upload", store_with(id_token=token)) is True
    assert authorization_gate("/upload", store_with(id_token=token)) is None


@pytest.mark.parametrize("token", ["garbage", "a.b.c"])
def test_gate_malformed_token_unauthorized(token):
    assert is_authorized("/upload", store_with(id_token=token)) is False


def test_gate_token_without_exp_unauthorized():
    token = jwt.encode({"sub": "x"}, "test-secret", algorithm="HS256")
    assert is_authorized("/upload", store_with(id_token=token)) is False


def test_gate_redirects_to_hosted_login():
    assert authorization_gate("/upload", MemoryCookieStore()) == Redirect(config.LOGIN_URL)


# --- code exchange ---


def test_extract_code():
    assert extract_code("code=abc123") == "abc123"
    assert extract_code("state=x&code=abc123") == "abc123"
    assert extract_code("") is None
    assert extract_code("state=x") is None


def test_authorize_without_code_redirects_to_login(caplog):
    store = MemoryCookieStore()
    with patch("client_web.auth.httpx.post") as post, caplog.at_level(logging.WARNING, logger="client_web.auth"):
        nav = authorize("", store)
    assert nav == Redirect(config.LOGIN_URL)
    assert "Not auth." in caplog.text
    post.assert_not_called()


def test_authorize_posts_four_form_fields():
    response = httpx.Response(
        200,
        json={"id_token": "A", "refresh_token": "B", "expires_in": 3600, "token_type": "Bearer"},
    )
    with patch("client_web.auth.httpx.post", return_value=response) as post:
        authorize("code=the-code", MemoryCookieStore())
    args, kwargs = post.call_args
    assert args[0] == config.TOKEN_ENDPOINT
    assert kwargs["data"] == {
        "grant_type": "authorization_code",
        "code": "the-code",
        "client_id": config.COGNITO_CLIENT_ID,
        "redirect_uri": config.CALLBACK_URI,
    }
    assert kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"


def test_authorize_success_stores_cookies_and_navigates_to_upload():
    store = MemoryCookieStore()
    response = httpx.Response(
        200,
        json={"id_token": "A", "refresh_token": "B", "expires_in": 3600, "token_type": "Bearer"},
    )
    with patch("client_web.auth.httpx.post", return_value=response):
        nav = authorize("code=xyz", store)
    assert nav == Redirect(config.UPLOAD_URL)
    assert store.get("id_token") == "A"
    assert store.get("refresh_token") == "B"
    assert get_token(store) == "A"


def test_authorize_cookie_lifetime_matches_expires_in():
    clock_now = [1000.0]
    store = MemoryCookieStore(clock=lambda: clock_now[0])
    response = httpx.Response(
        200,
        json={"id_token": "A", "refresh_token": "B", "expires_in": 60, "token_type": "Bearer"},
    )
    with patch("client_web.auth.httpx.post", return_value=response):
        authorize("code=xyz", store)
    clock_now[0] += 61
    assert store.get("id_token") is None
    assert store.get("refresh_token") is None


def test_authorize_non_2xx_stops_without_cookies(caplog):
    store = MemoryCookieStore()
    response = httpx.Response(400, json={"error": "invalid_grant"})
    with patch("client_web.auth.httpx.post", return_value=response) as post, caplog.at_level(
        logging.ERROR, logger="client_web.auth"
    ):
        nav = authorize("code=used", store)
    assert nav is None
    assert store.get("id_token") is None
    assert post.call_count == 1
    assert "400" in caplog.text


def test_authorize_network_error_stops():
    store = MemoryCookieStore()
    with patch("client_web.auth.httpx.post", side_effect=httpx.ConnectError("connection refused")) as post:
        nav = authorize("code=abc", store)
    assert nav is None
    assert store.get("id_token") is None
    assert post.call_count == 1


def test_authorize_malformed_token_response_stops():
    store = MemoryCookieStore()
    with patch("client_web.auth.httpx.post", return_value=httpx.Response(200, json={"token_type": "Bearer"})):
        nav = authorize("code=abc", store)
    assert nav is None
    assert store.get("id_token") is None


def test_get_token_empty_when_absent():
    assert get_token(MemoryCookieStore()) == ""


@pytest.mark.parametrize(
    "body",
    [
        {"id_token": None, "refresh_token": "B", "expires_in": 3600, "token_type": "Bearer"},
        {"id_token": "", "refresh_token": "B", "expires_in": 3600, "token_type": "Bearer"},
        {"id_token": "A", "refresh_token": None, "expires_in": 3600, "token_type": "Bearer"},
        {"id_token": 123, "refresh_token": "B", "expires_in": 3600, "token_type": "Bearer"},
        {"id_token": "A", "refresh_token": "B", "expires_in": 0, "token_type": "Bearer"},
        {"id_token": "A", "refresh_token": "B", "expires_in": "3600", "token_type": "Bearer"},
        {"id_token": "A", "refresh_token": "B", "expires_in": True, "token_type": "Bearer"},
        ["A", "B"],
    ],
)
def test_authorize_rejects_token_response_with_bad_fields(body):
    store = MemoryCookieStore()
    with patch("client_web.auth.httpx.post", return_value=httpx.Response(200, json=body)):
        nav = authorize("code=abc", store)
    assert nav is None
    assert store.get("id_token") is None
    assert store.get("refresh_token") is None
