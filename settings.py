import logging
from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Backend configuration
API_BASE_URL = config.get_url("API_BASE_URL", "http://localhost:8081")

# Endpoints consumed by the client (paths relative to API_BASE_URL)
REFRESH_URL = config.get("REFRESH_URL", "/api/admin/auth/refresh-token")
CSRF_URL = config.get("CSRF_URL", "/api/auth/csrf")
PERMISSIONS_ME_URL = config.get("PERMISSIONS_ME_URL", "/api/permissions/me")

# CSRF header name, also the credential name the token is stored under
CSRF_HEADER_NAME = config.get("CSRF_HEADER_NAME", "X-XSRF-TOKEN")

# Credential lifetimes in days
# REMEMBER_DAYS applies to tokens persisted after a refresh; 0 keeps them session-only
REMEMBER_DAYS = config.get("REMEMBER_DAYS", 365)
CSRF_TOKEN_DAYS = config.get("CSRF_TOKEN_DAYS", 1)

# Where the user is sent when the session cannot be recovered
LOGIN_PATH = config.get("LOGIN_PATH", "/login")

# Timeout configuration
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 30.0)

# Credential storage
CREDENTIALS_FILE = config.get("CREDENTIALS_FILE", str(Path.home() / ".navadmin" / "credentials.json"))

LOG_LEVEL = config.get("LOG_LEVEL", "info")


def configure_logging(level: str = None) -> None:
    """Install a console handler on the root logger at LOG_LEVEL"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(console_handler)
