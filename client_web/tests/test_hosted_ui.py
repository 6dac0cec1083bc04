"""Tests for hosted UI URL and token request helpers."""
from urllib.parse import parse_qs, urlparse

from client_web import config
from client_web.hosted_ui import (
    build_login_url,
    build_token_request_body,
    provider_login_key,
    token_endpoint_url,
)


def test_build_login_url_includes_required_params():
    url = build_login_url(
        domain="my-app",
        region="us-east-1",
        client_id="client1",
        redirect_uri="http://localhost:3000/auth",
    )
    parsed = urlparse(url)
    assert parsed.scheme == "https"
    assert parsed.netloc == "my-app.auth.us-east-1.amazoncognito.com"
    assert parsed.path == "/login"
    params = parse_qs(parsed.query)
    assert params == {
        "client_id": ["client1"],
        "response_type": ["code"],
        "scope": ["email openid profile"],
        "redirect_uri": ["http://localhost:3000/auth"],
    }
    assert "scope=email+openid+profile" in url


def test_token_endpoint_url():
    assert (
        token_endpoint_url(domain="my-app", region="eu-west-1")
        == "https://my-app.auth.eu-west-1.amazoncognito.com/oauth2/token"
    )


def test_provider_login_key():
    assert (
        provider_login_key(region="us-east-1", user_pool_id="us-east-1_AbC")
        == "cognito-idp.us-east-1.amazonaws.com/us-east-1_AbC"
    )


def test_token_request_body_has_exactly_four_fields():
    body = build_token_request_body(code="abc", client_id="c1", redirect_uri="http://x/auth")
    assert body == {
        "grant_type": "authorization_code",
        "code": "abc",
        "client_id": "c1",
        "redirect_uri": "http://x/auth",
    }


def test_config_derives_callback_from_site_url():
    assert config.CALLBACK_URI == f"{config.SITE_URL}/auth"
    assert config.CALLBACK_PATH == "/auth"
    assert config.UPLOAD_URL == f"{config.SITE_URL}/upload"
    assert config.LOGIN_URL.startswith(f"https://{config.COGNITO_DOMAIN_NAME}.auth.{config.REGION}.amazoncognito.com/login?")
