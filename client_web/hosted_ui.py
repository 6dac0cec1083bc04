"""
Cognito hosted UI helpers: login URL, token endpoint, token request body.
Authorization code grant only; the app client has no secret.
"""
from urllib.parse import urlencode

LOGIN_SCOPE = "email openid profile"


def hosted_ui_base(*, domain: str, region: str) -> str:
    return f"https://{domain}.auth.{region}.amazoncognito.com"


def build_login_url(*, domain: str, region: str, client_id: str, redirect_uri: str) -> str:
    """Build the hosted UI /login URL. The hosted page issues ?code=... to redirect_uri."""
    params = {
        "client_id": client_id,
        "response_type": "code",
        "scope": LOGIN_SCOPE,
        "redirect_uri": redirect_uri,
    }
    return f"{hosted_ui_base(domain=domain, region=region)}/login?{urlencode(params)}"


def token_endpoint_url(*, domain: str, region: str) -> str:
    return f"{hosted_ui_base(domain=domain, region=region)}/oauth2/token"


def provider_login_key(*, region: str, user_pool_id: str) -> str:
    """Logins map key the identity pool expects for user pool tokens."""
    return f"cognito-idp.{region}.amazonaws.com/{user_pool_id}"


def build_token_request_body(*, code: str, client_id: str, redirect_uri: str) -> dict[str, str]:
    """Form fields for POST /oauth2/token (authorization_code grant)."""
    return {
        "grant_type": "authorization_code",
        "code": code,
        "client_id": client_id,
        "redirect_uri": redirect_uri,
    }
