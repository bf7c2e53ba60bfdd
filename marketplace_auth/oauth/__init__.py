# marketplace_auth/oauth/__init__.py
"""GitHub login flow: state handling, token exchange and the callback finisher."""

from .errors import OAuthFlowError, StateValidationError, TokenExchangeError, MarketplaceSyncError
from .models import OAuthSecrets, FlowSuccess, FlowFailure, FlowOutcome
from .state import OAuthState, generate_state, validate_state, origin_marker_from_request
from .provider import GitHubOAuthClient

__all__ = [
    "OAuthFlowError",
    "StateValidationError",
    "TokenExchangeError",
    "MarketplaceSyncError",
    "OAuthSecrets",
    "FlowSuccess",
    "FlowFailure",
    "FlowOutcome",
    "OAuthState",
    "generate_state",
    "validate_state",
    "origin_marker_from_request",
    "GitHubOAuthClient",
]
