# marketplace_auth/dependencies.py
import logging
from fastapi import HTTPException, Request, status, Header, Depends
from typing import Optional, Annotated

import httpx

from .settings import settings
from .oauth.models import OAuthSecrets
from .oauth.provider import GitHubOAuthClient
from .marketplace.service import MarketplaceSyncService
from .marketplace.storage import get_marketplace_store
from .marketplace.storage_interfaces import AbstractMarketplaceStore

logger = logging.getLogger(__name__)


async def get_admin_api_key(
    x_admin_api_key: Annotated[
        Optional[str],
        Header(description="The API Key for accessing admin routes.")
    ] = None
) -> str:
    """Guards the marketplace admin routes. Without a server-side key they answer 503."""
    if not settings.admin_api_key:
        logger.critical("ADMIN_API_KEY is not set; marketplace admin routes are disabled.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Marketplace admin API is disabled: no admin key configured.",
        )

    if not x_admin_api_key:
        logger.warning("Marketplace admin: request without X-Admin-API-Key.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated: X-Admin-API-Key header missing.",
            headers={"WWW-Authenticate": 'Basic realm="Admin Area"'},
        )

    if x_admin_api_key != settings.admin_api_key:
        logger.warning("Marketplace admin: X-Admin-API-Key did not match.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Invalid API Key.",
            headers={"WWW-Authenticate": 'Basic realm="Admin Area"'},
        )

    return x_admin_api_key


def get_oauth_secrets() -> OAuthSecrets:
    """
    OAuth app credentials from settings. A missing secret is a server
    misconfiguration and raises ValueError, which the callback logs and
    turns into the failure redirect.
    """
    if not settings.client_id or not settings.client_secret:
        raise ValueError("CLIENT_ID and CLIENT_SECRET must be configured.")
    return OAuthSecrets(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        redirect_uri=settings.redirect_uri,
    )


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """The process-wide outbound HTTP client created in the app lifespan."""
    http_client = getattr(request.app.state, "http_client", None)
    if http_client is None:
        logger.error("CRITICAL: shared http_client not initialized on app.state.")
        raise HTTPException(status_code=503, detail="Outbound HTTP client unavailable.")
    return http_client


async def get_provider_client(
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)]
) -> GitHubOAuthClient:
    return GitHubOAuthClient(http_client)


async def get_marketplace_sync_service(
    provider_client: Annotated[GitHubOAuthClient, Depends(get_provider_client)],
    marketplace_store: Annotated[AbstractMarketplaceStore, Depends(get_marketplace_store)]
) -> MarketplaceSyncService:
    return MarketplaceSyncService(provider_client, marketplace_store)
