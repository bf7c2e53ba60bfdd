# marketplace_auth/oauth/provider.py
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode, parse_qs

import httpx

from ..settings import settings
from .errors import TokenExchangeError
from .models import OAuthSecrets
from .state import OAuthState

logger = logging.getLogger(__name__)


def _parse_token_response(response: httpx.Response) -> Dict[str, Any]:
    """
    Read the token endpoint response. GitHub answers form-encoded unless JSON
    is negotiated, so both are accepted.
    """
    content_type = response.headers.get("content-type", "").lower()
    if "application/json" in content_type:
        try:
            parsed = response.json()
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {k: v[0] for k, v in parse_qs(response.text, keep_blank_values=True).items() if v}


class GitHubOAuthClient:
    """
    Calls to the identity provider's authorize, token and marketplace
    endpoints. Holds no per-call state, so one instance (and its pooled
    `httpx.AsyncClient`) is shared across concurrent requests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        authorize_url: Optional[str] = None,
        token_url: Optional[str] = None,
        marketplace_purchases_url: Optional[str] = None,
        user_agent: Optional[str] = None,
    ):
        self.http_client = http_client
        self.authorize_url = authorize_url or settings.github_authorize_url
        self.token_url = token_url or settings.github_token_url
        self.marketplace_purchases_url = marketplace_purchases_url or settings.github_marketplace_purchases_url
        self.user_agent = user_agent or settings.marketplace_user_agent

    def authorization_url(self, client_id: str, redirect_uri: str, state: OAuthState) -> str:
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "state": state.encode(),
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, secrets: OAuthSecrets, code: str, state: str) -> str:
        """
        Exchange an authorization code for an access token.

        Raises:
            TokenExchangeError: The response carries an `error` field or no
                `access_token`, whatever its status code.
        """
        payload = {
            "client_id": secrets.client_id,
            "client_secret": secrets.client_secret,
            "code": code,
            "redirect_uri": secrets.redirect_uri,
            "state": state,
        }
        response = await self.http_client.post(self.token_url, json=payload)
        token_content = _parse_token_response(response)

        if token_content.get("error") is not None:
            logger.error(f"TokenResponse: {response.text}")
            raise TokenExchangeError(response.text, status_code=response.status_code, error=token_content.get("error"))

        access_token = token_content.get("access_token")
        if not access_token:
            logger.error(f"TokenResponse without access_token ({response.status_code}): {response.text}")
            raise TokenExchangeError(response.text, status_code=response.status_code)

        logger.info("Authorization code exchanged for an access token.")
        return access_token

    async def fetch_marketplace_purchases(self, access_token: str) -> List[Dict[str, Any]]:
        """
        GET the user's marketplace purchases.

        Raises:
            httpx.HTTPStatusError: Non-2xx answer from the API.
            ValueError: The body is not a JSON list.
        """
        headers = {
            "User-Agent": self.user_agent,
            "Authorization": f"token {access_token}",
            "Accept": "application/vnd.github+json",
        }
        response = await self.http_client.get(self.marketplace_purchases_url, headers=headers)
        response.raise_for_status()

        plan_data = response.json()
        if not isinstance(plan_data, list):
            raise ValueError(f"Expected a list of marketplace purchases, got: {response.text[:500]}")
        logger.info(f"Fetched {len(plan_data)} marketplace purchase(s).")
        return plan_data
