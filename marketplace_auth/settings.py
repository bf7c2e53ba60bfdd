# marketplace_auth/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
import logging
from pathlib import Path

logger = logging.getLogger(__name__)
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s SETTINGS.PY - [%(levelname)s] - %(message)s'
    )

# marketplace_auth/settings.py -> two .parent calls reach the project root
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.exists():
    logger.info(f"SETTINGS.PY: .env file FOUND at explicit path: {DOTENV_PATH}")
else:
    logger.warning(
        f"SETTINGS.PY: .env file NOT FOUND at explicit path: {DOTENV_PATH}. "
        "Will rely on OS env vars or defaults."
    )


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    app_name: str = "Marketplace Auth"
    debug_mode: bool = False

    # GitHub OAuth app credentials
    client_id: str = ""
    client_secret: Optional[str] = Field(
        default=None,
        description="OAuth app client secret. MUST be set for the callback to succeed."
    )
    redirect_uri: str = "http://localhost:7071/api/callback"

    # Browser-facing web application the flow redirects back to
    webhost: str = "http://localhost:8888"
    landing_path: str = "/winning"
    app_landing_path: str = "/app"

    # Identity provider endpoints
    github_authorize_url: str = "https://github.com/login/oauth/authorize"
    github_token_url: str = "https://github.com/login/oauth/access_token"
    github_marketplace_purchases_url: str = "https://api.github.com/user/marketplace_purchases"
    marketplace_user_agent: str = "IMGBOT"
    http_client_timeout_seconds: float = 30.0

    # Storage
    storage_backend: str = "sqlite"
    sqlite_db_path: str = "./marketplace_auth_data.sqlite3"
    marketplace_table_name: str = "marketplace"

    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    redis_ssl: bool = False

    admin_api_key: Optional[str] = Field(
        default=None,
        description="API Key for accessing admin routes."
    )

    model_config = SettingsConfigDict(
        env_file=DOTENV_PATH if DOTENV_PATH.exists() else None,
        extra="ignore",
        env_file_encoding='utf-8'
    )


settings = Settings()

# Sensitive values are masked
logger.info(
    f"SETTINGS.PY: client_id: '{settings.client_id}', "
    f"client_secret: {'********' if settings.client_secret else 'None'}, "
    f"redirect_uri: '{settings.redirect_uri}'"
)
logger.info(
    f"SETTINGS.PY: webhost: '{settings.webhost}', "
    f"storage_backend: '{settings.storage_backend}', debug_mode: {settings.debug_mode}"
)
logger.info(
    f"SETTINGS.PY: admin_api_key: "
    f"{'********' if settings.admin_api_key else 'None'}"
)
