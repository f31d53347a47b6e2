"""Configuration management for wikifs core."""

import logging
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return default


# URI scheme the virtual filesystem is registered under (case-insensitive)
WIKI_SCHEME = "wiki"

# Suffix carried by every document on disk, hidden from virtual paths
WIKI_FILE_EXTENSION = ".md"

# Wiki root inside each workspace folder
WIKI_ROOT_SUBDIR = (
    get_env("WIKIFS_ROOT_SUBDIR", ".vscode/.wiki") or ".vscode/.wiki"
)

# Workspace folder list used by the CLI
WORKSPACES_FILE = get_env("WIKIFS_WORKSPACES_FILE", "wikifs.yaml") or "wikifs.yaml"

# Logging
LOG_LEVEL = get_env("LOG_LEVEL", "INFO") or "INFO"
LOG_DEBUG = get_env_bool("WIKIFS_DEBUG", False)


def setup_logging() -> logging.Logger:
    """Configure and return logger."""
    level = (
        logging.DEBUG if LOG_DEBUG else getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    )
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level,
    )
    return logging.getLogger(__name__)
