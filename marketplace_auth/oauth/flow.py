# marketplace_auth/oauth/flow.py
"""
Callback state machine.

`complete_callback` runs the correlation check, the code exchange and the
marketplace sync and reduces every outcome to a `FlowOutcome`. `finish` is
the single place that turns an outcome into the browser redirect, so success
and every failure leave through the same door.
"""
import logging
from typing import Awaitable, Callable, Optional

from fastapi.responses import RedirectResponse

from ..marketplace.service import MarketplaceSyncService
from ..marketplace.storage import get_marketplace_store
from ..marketplace.storage_interfaces import AbstractMarketplaceStore
from ..settings import settings
from ..utils.http import redirect_to, set_cookie
from .errors import OAuthFlowError, StateValidationError
from .models import FlowFailure, FlowOutcome, FlowSuccess, OAuthSecrets
from .provider import GitHubOAuthClient
from .state import OAuthState, validate_state

logger = logging.getLogger(__name__)

TOKEN_COOKIE_NAME = "token"


def landing_url(state: Optional[OAuthState]) -> str:
    if state is not None and state.is_from_app:
        return f"{settings.webhost}{settings.app_landing_path}"
    return f"{settings.webhost}{settings.landing_path}"


def finish(outcome: FlowOutcome) -> RedirectResponse:
    """Build the redirect for a finished callback, with the token cookie on success."""
    if isinstance(outcome, FlowSuccess):
        response = redirect_to(landing_url(outcome.state))
        set_cookie(response, TOKEN_COOKIE_NAME, outcome.token)
        return response
    return redirect_to(landing_url(None))


def check_correlation(state_from_cookie: Optional[str], state_from_query: Optional[str], code: Optional[str]) -> OAuthState:
    """
    Raises:
        StateValidationError: missing cookie, state mismatch or missing code.
    """
    if not state_from_cookie:
        logger.error("state cookie is missing")
        raise StateValidationError("state_cookie_missing", state_from_cookie, state_from_query)
    if not validate_state(state_from_cookie, state_from_query):
        raise StateValidationError("state_mismatch", state_from_cookie, state_from_query)
    if not code:
        logger.error("code is missing")
        raise StateValidationError("code_missing", state_from_cookie, state_from_query)
    return OAuthState.decode(state_from_query)


async def complete_callback(
    *,
    state_from_cookie: Optional[str],
    state_from_query: Optional[str],
    code: Optional[str],
    provider_client: GitHubOAuthClient,
    secrets_provider: Callable[[], OAuthSecrets],
    store_provider: Callable[[], Awaitable[AbstractMarketplaceStore]] = get_marketplace_store,
) -> FlowOutcome:
    """Run the callback and report its outcome. Never raises."""
    try:
        oauth_state = check_correlation(state_from_cookie, state_from_query, code)
        secrets = secrets_provider()

        token = await provider_client.exchange_code(secrets, code, state_from_query)

        marketplace_store = await store_provider()
        sync_service = MarketplaceSyncService(provider_client, marketplace_store)
        synced = await sync_service.sync_purchases(token)

        return FlowSuccess(token=token, state=oauth_state, purchases_synced=synced)
    except OAuthFlowError as e:
        logger.error(f"Auth callback failed ({e.reason}): {e.detail_message}")
        return FlowFailure(reason=e.reason)
    except Exception as e:
        logger.error(f"Error processing auth: {e}", exc_info=True)
        return FlowFailure(reason="unexpected_error")
