# marketplace_auth/oauth/endpoints.py
from fastapi import APIRouter, Depends, Request, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse
from typing import Annotated, Optional
import logging

from ..dependencies import get_oauth_secrets, get_provider_client
from ..settings import settings
from ..utils.http import expire_cookie, read_cookie, redirect_to, set_cookie
from .flow import TOKEN_COOKIE_NAME, complete_callback, finish
from .provider import GitHubOAuthClient
from .state import STATE_COOKIE_NAME, generate_state, origin_marker_from_request

logger = logging.getLogger(__name__)
oauth_router = APIRouter(tags=["OAuth"])


@oauth_router.api_route("/setup", methods=["GET", "POST"], name="oauth_setup", response_class=RedirectResponse)
async def setup(
    provider_client: Annotated[GitHubOAuthClient, Depends(get_provider_client)],
    from_: Annotated[Optional[str], Query(alias="from")] = None,
):
    """Start the login: set the state cookie and send the browser to GitHub."""
    # The secret is only needed at exchange time, so only the client id gates Setup
    if not settings.client_id:
        logger.error("Setup: CLIENT_ID is not configured.")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Login is not configured.")

    state = generate_state(origin_marker_from_request(from_))
    authorization_url = provider_client.authorization_url(settings.client_id, settings.redirect_uri, state)
    logger.info(f"Setup: issued state, from={from_!r}. Redirecting to provider.")

    response = redirect_to(authorization_url)
    set_cookie(response, STATE_COOKIE_NAME, state.encode())
    return response


@oauth_router.api_route("/callback", methods=["GET", "POST"], name="oauth_callback", response_class=RedirectResponse)
async def callback(
    request: Request,
    provider_client: Annotated[GitHubOAuthClient, Depends(get_provider_client)],
    state: Annotated[Optional[str], Query()] = None,
    code: Annotated[Optional[str], Query()] = None,
):
    """Finish the login. Always answers with a redirect, never an error page."""
    outcome = await complete_callback(
        state_from_cookie=read_cookie(request, STATE_COOKIE_NAME),
        state_from_query=state,
        code=code,
        provider_client=provider_client,
        secrets_provider=get_oauth_secrets,
    )
    return finish(outcome)


@oauth_router.get("/isauthenticated", name="is_authenticated")
async def is_authenticated(request: Request):
    """Reports whether a token cookie is present. The token itself is not checked."""
    token = read_cookie(request, TOKEN_COOKIE_NAME)
    response = JSONResponse({"result": bool(token)}, status_code=status.HTTP_200_OK)
    return response


@oauth_router.get("/signout", name="signout", response_class=RedirectResponse)
async def signout():
    response = redirect_to(f"{settings.webhost}{settings.app_landing_path}")
    expire_cookie(response, TOKEN_COOKIE_NAME)
    return response
