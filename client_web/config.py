"""
Client Web configuration. Values come from the CDK stack outputs (see cdk.json / `cdk deploy`).
Pool ids, client id and domain are public identifiers, not secrets.
"""
import os
from urllib.parse import urlparse

from client_web.hosted_ui import build_login_url, provider_login_key, token_endpoint_url

# Where this app is served; must match the clientAppUrl used at provisioning time (CORS + callback)
SITE_URL = os.environ.get("SITE_URL", "http://localhost:3000").rstrip("/")

REGION = os.environ.get("AWS_REGION", "ap-northeast-1")

# CDK outputs
S3_BUCKET_NAME = os.environ.get("S3_BUCKET_NAME", "cognito-user-tracking-upload")
IDENTITY_POOL_ID = os.environ.get("COGNITO_IDENTITY_POOL_ID", "ap-northeast-1:00000000-0000-0000-0000-000000000000")
COGNITO_DOMAIN_NAME = os.environ.get("COGNITO_DOMAIN_NAME", "user-tracking-login")
COGNITO_USER_POOL_ID = os.environ.get("COGNITO_USER_POOL_ID", "ap-northeast-1_example")
COGNITO_CLIENT_ID = os.environ.get("COGNITO_CLIENT_ID", "test-client")

# Hosted UI redirects here with ?code=...
CALLBACK_URI = f"{SITE_URL}/auth"
CALLBACK_PATH = urlparse(CALLBACK_URI).path

UPLOAD_URL = f"{SITE_URL}/upload"

LOGIN_URL = build_login_url(
    domain=COGNITO_DOMAIN_NAME,
    region=REGION,
    client_id=COGNITO_CLIENT_ID,
    redirect_uri=CALLBACK_URI,
)
TOKEN_ENDPOINT = token_endpoint_url(domain=COGNITO_DOMAIN_NAME, region=REGION)

# Key under which the id token is presented to the identity pool
PROVIDER_LOGIN_KEY = provider_login_key(region=REGION, user_pool_id=COGNITO_USER_POOL_ID)

# Token endpoint request timeout (seconds)
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "10"))
