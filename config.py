"""
Configuration module for the GitHub star history tools.
Handles environment variable loading, fetch settings, and logging.
"""

import pathlib
import os
import sys
import logging
from dataclasses import dataclass, replace
from typing import Optional
from dotenv import load_dotenv

# Configure logging to output to stderr (required for MCP servers)
logging.basicConfig(
    level=logging.INFO,
    handlers=[logging.StreamHandler(sys.stderr)],
    format="%(asctime)s [star-history] %(message)s"
)

logger = logging.getLogger(__name__)

# User-level config directory, only read for a .env file
CONFIG_DIR = pathlib.Path.home() / ".star_history"

# Load environment variables (.env files)
# Strategy: 1. Project-level .env, then 2. User-level .env
script_dir = pathlib.Path(__file__).parent
load_dotenv(script_dir / ".env")
load_dotenv(CONFIG_DIR / ".env")

GITHUB_API_URL = "https://api.github.com"

# Maximum allowed by the GitHub API. Any other value doesn't work well.
DEFAULT_PAGE_SIZE = 100

# At most this many page requests are in flight at once
DEFAULT_MAX_CONCURRENCY = 10

# Seconds to wait after a 403 before retrying the same request
RATE_LIMIT_WAIT = 10.0

REQUEST_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Immutable fetch configuration passed into every core operation."""
    token: Optional[str] = None
    page_size: int = DEFAULT_PAGE_SIZE
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    rate_limit_wait: float = RATE_LIMIT_WAIT
    api_url: str = GITHUB_API_URL
    timeout: float = REQUEST_TIMEOUT


def normalize_token(token):
    """Returns the token, or None for empty / 'none' placeholders."""
    if token is None:
        return None
    token = str(token).strip()
    if token.lower() in ("none", ""):
        return None
    return token


def get_page_size():
    """Reads GITHUB_PAGE_SIZE, falling back to the default on bad values."""
    raw = os.getenv("GITHUB_PAGE_SIZE")
    try:
        page_size = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_PAGE_SIZE
    if page_size <= 0:
        return DEFAULT_PAGE_SIZE
    return page_size


def load_settings(token=None, **overrides):
    """
    Builds Settings from the environment.

    Args:
        token (str, optional): Explicit token; defaults to GITHUB_TOKEN.
        **overrides: Any other Settings field.

    Returns:
        Settings: The frozen configuration value.
    """
    settings = Settings(
        token=normalize_token(token) or normalize_token(os.getenv("GITHUB_TOKEN")),
        page_size=get_page_size(),
    )
    if overrides:
        settings = replace(settings, **overrides)
    return settings
