# marketplace_auth/utils/http.py
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request, Response
from fastapi.responses import RedirectResponse


# Expiry used to make the browser drop a cookie
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def read_cookie(request: Request, name: str) -> Optional[str]:
    """Cookie value, or None when absent or empty."""
    value = request.cookies.get(name)
    return value or None


def set_cookie(response: Response, name: str, value: str, expires: Optional[datetime] = None) -> Response:
    # Starlette quotes values containing a comma ("a\054b"); request.cookies unquotes them on read
    response.set_cookie(
        key=name,
        value=value,
        path="/",
        expires=expires,
        httponly=True,
        samesite="lax",
    )
    return response


def expire_cookie(response: Response, name: str, sentinel: str = "rubbish") -> Response:
    """Overwrite a cookie with a sentinel value that expired at the epoch."""
    return set_cookie(response, name, sentinel, expires=EPOCH)


def redirect_to(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)
