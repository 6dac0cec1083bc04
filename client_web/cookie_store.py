"""
Cookie store: the only state shared between requests (id_token, refresh_token).
Routes use RequestCookieStore (request cookies in, Set-Cookie headers out).
MemoryCookieStore keeps expiry itself and is used where no browser is involved (tests).
"""
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Protocol

from fastapi import Response

ID_TOKEN = "id_token"
REFRESH_TOKEN = "refresh_token"

COOKIE_PATH = "/"
COOKIE_SAMESITE = "strict"


class CookieStore(Protocol):
    def get(self, name: str) -> str | None: ...

    def set(self, name: str, value: str, *, max_age: int) -> None: ...

    def clear(self, name: str) -> None: ...


@dataclass
class _PendingCookie:
    value: str | None
    max_age: int


class RequestCookieStore:
    """
    Cookies sent by the browser for this request, plus writes to send back.
    Writes are visible to later get() calls in the same request; call apply() on the response.
    Expiry is enforced by the browser via Max-Age, so values read here are live.
    """

    def __init__(self, cookies: Mapping[str, str]):
        self._cookies = dict(cookies)
        self._pending: dict[str, _PendingCookie] = {}

    def get(self, name: str) -> str | None:
        pending = self._pending.get(name)
        if pending is not None:
            return pending.value
        return self._cookies.get(name)

    def set(self, name: str, value: str, *, max_age: int) -> None:
        self._pending[name] = _PendingCookie(value=value, max_age=max_age)

    def clear(self, name: str) -> None:
        self._pending[name] = _PendingCookie(value=None, max_age=0)

    def apply(self, response: Response) -> Response:
        for name, cookie in self._pending.items():
            if cookie.value is None:
                response.delete_cookie(name, path=COOKIE_PATH, samesite=COOKIE_SAMESITE)
            else:
                response.set_cookie(
                    name,
                    cookie.value,
                    max_age=cookie.max_age,
                    path=COOKIE_PATH,
                    samesite=COOKIE_SAMESITE,
                )
        return response


@dataclass
class _StoredCookie:
    value: str
    expires_at: float


class MemoryCookieStore:
    """Dict-backed store; a cookie disappears once max_age seconds have passed on `clock`."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._cookies: dict[str, _StoredCookie] = {}

    def get(self, name: str) -> str | None:
        cookie = self._cookies.get(name)
        if cookie is None:
            return None
        if self._clock() >= cookie.expires_at:
            del self._cookies[name]
            return None
        return cookie.value

    def set(self, name: str, value: str, *, max_age: int) -> None:
        if max_age <= 0:
            self.clear(name)
            return
        self._cookies[name] = _StoredCookie(value=value, expires_at=self._clock() + max_age)

    def clear(self, name: str) -> None:
        self._cookies.pop(name, None)
