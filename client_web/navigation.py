"""
Navigation effects. Gate and code exchange return these instead of redirecting directly,
so routes (or tests) decide what to do with them.
"""
from dataclasses import dataclass

from fastapi.responses import RedirectResponse


@dataclass(frozen=True)
class Redirect:
    url: str

    def to_response(self) -> RedirectResponse:
        return RedirectResponse(url=self.url, status_code=302)
