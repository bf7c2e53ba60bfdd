# marketplace_auth/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

import httpx
from dotenv import load_dotenv
load_dotenv()

from .settings import settings
from .storage.sqlite_base import close_sqlite_db_connection, get_sqlite_db_connection
from .marketplace.storage import get_marketplace_store, reset_marketplace_store
from .marketplace.endpoints import marketplace_admin_router
from .oauth.endpoints import oauth_router

if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level="DEBUG" if settings.debug_mode else "INFO",
        format='%(asctime)s - %(name)s [%(levelname)s] - %(message)s'
    )

logger = logging.getLogger(__name__)
logger.setLevel(logging.DEBUG if settings.debug_mode else logging.INFO)


@asynccontextmanager
async def marketplace_auth_lifespan(app_instance: FastAPI):
    """
    Creates the shared outbound HTTP client and the storage backend at
    startup, and releases both at shutdown.
    """
    logger.info("Application startup initiated.")

    if settings.storage_backend == "sqlite":
        await get_sqlite_db_connection()
        logger.info("SQLite backend selected and connection initialized.")
    elif settings.storage_backend != "redis":
        raise ValueError(f"Unsupported storage_backend: {settings.storage_backend}")

    try:
        await get_marketplace_store()
    except Exception as e:
        # The callback retries store creation per request and fails open
        logger.error(f"Marketplace store unavailable at startup: {e}", exc_info=True)

    # One pooled client for every request in this process
    app_instance.state.http_client = httpx.AsyncClient(timeout=settings.http_client_timeout_seconds)
    logger.info("Shared httpx.AsyncClient created.")

    yield

    logger.info("Application shutdown initiated.")
    await app_instance.state.http_client.aclose()
    try:
        await reset_marketplace_store()
        if settings.storage_backend == "sqlite":
            await close_sqlite_db_connection()
    except Exception as e_td:
        logger.error(f"Teardown error: {e_td}", exc_info=True)
    logger.info("All components torn down.")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug_mode,
    lifespan=marketplace_auth_lifespan,
)

# The web app polls /isauthenticated from the browser with its cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.webhost.rstrip("/")],
    allow_methods=["GET"],
    allow_credentials=True,
)

app.include_router(oauth_router)
app.include_router(marketplace_admin_router)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok"}
