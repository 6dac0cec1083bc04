"""
Identity pool federation: id token -> temporary, role-scoped AWS credentials.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import boto3

from client_web import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    access_key_id: str
    secret_key: str
    session_token: str
    expiration: datetime | None = None


class CredentialsExchange(Protocol):
    def exchange_token_for_credentials(self, id_token: str) -> Credentials: ...


class CognitoIdentityFederation:
    """
    Enhanced (simplified) identity pool flow: GetId then GetCredentialsForIdentity.
    botocore errors (NotAuthorizedException, ParamValidationError for an empty token, ...) propagate.
    """

    def __init__(
        self,
        *,
        identity_pool_id: str = config.IDENTITY_POOL_ID,
        login_key: str = config.PROVIDER_LOGIN_KEY,
        region: str = config.REGION,
        client=None,
    ):
        self.identity_pool_id = identity_pool_id
        self.login_key = login_key
        self._client = client or boto3.session.Session().client("cognito-identity", region_name=region)

    def exchange_token_for_credentials(self, id_token: str) -> Credentials:
        logins = {self.login_key: id_token}
        identity = self._client.get_id(IdentityPoolId=self.identity_pool_id, Logins=logins)
        identity_id = identity["IdentityId"]
        resp = self._client.get_credentials_for_identity(IdentityId=identity_id, Logins=logins)
        creds = resp["Credentials"]
        logger.debug("Obtained credentials for identity %s", identity_id)
        return Credentials(
            access_key_id=creds["AccessKeyId"],
            secret_key=creds["SecretKey"],
            session_token=creds["SessionToken"],
            expiration=creds.get("Expiration"),
        )
