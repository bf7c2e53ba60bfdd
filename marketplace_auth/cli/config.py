# marketplace_auth/cli/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

# marketplace_auth/cli/config.py -> three .parent calls reach the project root
project_root = Path(__file__).parent.parent.parent.resolve()

load_dotenv(dotenv_path=project_root / '.env', override=True)

CLI_API_BASE_URL = os.getenv("MARKETPLACE_AUTH_CLI_API_BASE_URL", "http://127.0.0.1:8000")

CLI_ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")
