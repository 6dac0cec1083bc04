"""
Client Web App: Cognito hosted UI login + direct S3 upload.
Every page except /health passes the authorization gate; unauthenticated users go to the hosted UI.
GET /, /auth (callback), /upload; POST /upload. Port 3000 to match SITE_URL.
"""
import copy
import html

import uvicorn
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse
from uvicorn.config import LOGGING_CONFIG

from client_web.auth import authorization_gate, authorize
from client_web.cookie_store import RequestCookieStore
from client_web.federation import CognitoIdentityFederation, CredentialsExchange
from client_web.upload import ObjectStorage, S3ObjectStorage, UploadStatus, upload_file

app = FastAPI(title="Client Web", version="0.1.0")

# Not behind the gate
UNGATED_PATHS = {"/health"}

_federation: CognitoIdentityFederation | None = None


def get_federation() -> CredentialsExchange:
    global _federation
    if _federation is None:
        _federation = CognitoIdentityFederation()
    return _federation


def get_storage() -> ObjectStorage:
    return S3ObjectStorage()


@app.middleware("http")
async def authorization_gate_middleware(request: Request, call_next):
    """On every page load: allow the callback through, otherwise require an unexpired id_token cookie."""
    if request.url.path in UNGATED_PATHS:
        return await call_next(request)
    redirect = authorization_gate(request.url.path, RequestCookieStore(request.cookies))
    if redirect is not None:
        return redirect.to_response()
    return await call_next(request)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "client_web"}


@app.get("/", response_class=HTMLResponse)
def home():
    """Home page with link to the upload test."""
    return HTMLResponse(
        """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Home</title></head>
<body>
  <h2>Home</h2>
  <p><a href="/upload">Go to upload test</a></p>
</body>
</html>"""
    )


@app.get("/auth", response_class=HTMLResponse)
def auth_callback(request: Request):
    """
    Hosted UI callback. Exchanges ?code=... for tokens, stores them as cookies, then goes to /upload.
    Missing code -> hosted UI login. Token endpoint failure -> stays here (logged only).
    """
    cookies = RequestCookieStore(request.cookies)
    redirect = authorize(request.url.query, cookies)
    if redirect is not None:
        return cookies.apply(redirect.to_response())
    return HTMLResponse("<p>authorizing...</p>")


def _upload_page(status: UploadStatus) -> HTMLResponse:
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>S3 Upload Test</title></head>
<body>
  <h2>S3 Upload Test</h2>
  <form action="/upload" method="post" enctype="multipart/form-data">
    <label>S3 prefix:
      <input type="text" name="prefix" placeholder="S3 prefix">
    </label>
    <label>Upload file:
      <input type="file" name="file">
    </label>
    <input type="submit" value="upload">
  </form>
  <p class="{html.escape(status.class_name)}">{html.escape(status.message)}</p>
</body>
</html>"""
    )


@app.get("/upload", response_class=HTMLResponse)
def upload_form():
    """Upload form with an empty status line."""
    return _upload_page(UploadStatus())


@app.post("/upload", response_class=HTMLResponse)
def upload_submit(
    request: Request,
    prefix: str = Form(""),
    file: UploadFile = File(...),
    federation: CredentialsExchange = Depends(get_federation),
    storage: ObjectStorage = Depends(get_storage),
):
    """Exchange the id_token cookie for temporary credentials and put the file at {prefix}/{filename}."""
    status = upload_file(
        prefix=prefix,
        filename=file.filename or "",
        body=file.file.read(),
        cookies=RequestCookieStore(request.cookies),
        federation=federation,
        storage=storage,
    )
    return _upload_page(status)


def build_log_config() -> dict:
    """uvicorn's logging dictConfig with the client_web logger on its default handler."""
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["loggers"]["client_web"] = {"handlers": ["default"], "level": "INFO", "propagate": False}
    return log_config


if __name__ == "__main__":
    uvicorn.run(
        "client_web.main:app",
        host="127.0.0.1",
        port=3000,
        reload=True,
        log_config=build_log_config(),
    )
