# marketplace_auth/oauth/errors.py
from typing import Optional


class OAuthFlowError(Exception):
    """
    Base class for failures inside the login callback flow.

    These never reach the browser. The callback logs them and finishes with
    the plain failure redirect.
    """

    def __init__(self, reason: str, detail_message: Optional[str] = None):
        self.reason = reason
        self.detail_message = detail_message or reason

        self.detail = {
            "error": reason,
            "message": self.detail_message,
        }

        super().__init__(self.detail_message)


class StateValidationError(OAuthFlowError):
    """
    The callback could not be correlated with the Setup call that started it:
    the state cookie is missing, the returned state does not match it, or the
    provider did not send an authorization code.
    """

    def __init__(
        self,
        reason: str,
        state_from_cookie: Optional[str] = None,
        state_from_query: Optional[str] = None
    ):
        self.state_from_cookie = state_from_cookie
        self.state_from_query = state_from_query
        super().__init__(
            reason,
            f"{reason}: cookie={state_from_cookie!r} query={state_from_query!r}"
        )


class TokenExchangeError(OAuthFlowError):
    """
    The token endpoint answered with an `error` field, or with no
    `access_token` at all. Carries the raw response body for the log.
    """

    def __init__(self, response_body: str, status_code: Optional[int] = None, error: Optional[str] = None):
        self.response_body = response_body
        self.status_code = status_code
        self.error = error
        super().__init__(
            "token_exchange_failed",
            f"TokenResponse ({status_code}): {response_body}"
        )


class MarketplaceSyncError(OAuthFlowError):
    """The marketplace purchases payload could not be read or stored."""

    def __init__(self, detail_message: str):
        super().__init__("marketplace_sync_failed", detail_message)
