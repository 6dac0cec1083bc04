"""
Direct-to-S3 upload with identity pool credentials.
Each submission is one attempt: exchange token, put object, report status. No retry.
"""
import logging
from dataclasses import dataclass
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from client_web import config
from client_web.auth import get_token
from client_web.cookie_store import CookieStore
from client_web.federation import Credentials, CredentialsExchange

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_FAILURE = "failure"


@dataclass(frozen=True)
class UploadStatus:
    class_name: str = ""
    message: str = ""

    def as_dict(self) -> dict:
        return {"className": self.class_name, "message": self.message}


class ObjectStorage(Protocol):
    def put_object(self, credentials: Credentials, *, bucket: str, key: str, body: bytes) -> dict: ...


class S3ObjectStorage:
    """S3 client built per call, from its own session, with temporary credentials; nothing is cached."""

    def __init__(self, region: str = config.REGION, session_factory=boto3.session.Session):
        self.region = region
        self._session_factory = session_factory

    def put_object(self, credentials: Credentials, *, bucket: str, key: str, body: bytes) -> dict:
        s3 = self._session_factory().client(
            "s3",
            region_name=self.region,
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_key,
            aws_session_token=credentials.session_token,
        )
        return s3.put_object(Bucket=bucket, Key=key, Body=body)


def object_key(prefix: str, filename: str) -> str:
    return f"{prefix}/{filename}"


def error_message(error: Exception) -> str:
    """Service error text (e.g. "Access Denied") for ClientError; str(error) otherwise."""
    if isinstance(error, ClientError):
        message = error.response.get("Error", {}).get("Message")
        if message:
            return message
    return str(error)


def upload_file(
    *,
    prefix: str,
    filename: str,
    body: bytes,
    cookies: CookieStore,
    federation: CredentialsExchange,
    storage: ObjectStorage,
    bucket: str = config.S3_BUCKET_NAME,
) -> UploadStatus:
    id_token = get_token(cookies)
    key = object_key(prefix, filename)
    try:
        credentials = federation.exchange_token_for_credentials(id_token)
        resp = storage.put_object(credentials, bucket=bucket, key=key, body=body)
    except (ClientError, BotoCoreError) as e:
        logger.exception("Upload of s3://%s/%s failed", bucket, key)
        return UploadStatus(STATUS_FAILURE, f"Error!! ({error_message(e)})")

    logger.info("Uploaded s3://%s/%s (ETag=%s)", bucket, key, resp.get("ETag") if resp else None)
    return UploadStatus(STATUS_SUCCESS, "Complete!!")
