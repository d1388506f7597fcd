"""
Configuration for the Trello MCP server.
Reads the process environment, optionally seeded from a .env file.
"""

import os

from dotenv import load_dotenv

from errors import ConfigurationError


DEFAULT_PORT = 3000

# Environment variable names
PORT_VAR = "PORT"
KEY_VAR = "TRELLO_KEY"
TOKEN_VAR = "TRELLO_TOKEN"


def load_environment() -> bool:
    """Load .env from the working directory. Real environment variables win."""
    return load_dotenv(override=False)


def get_port() -> int:
    """Get the HTTP port, defaulting to 3000."""
    raw = os.environ.get(PORT_VAR, "").strip()
    if not raw:
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ConfigurationError(f"{PORT_VAR} must be an integer, got {raw!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"{PORT_VAR} must be between 1 and 65535, got {port}")
    return port


def get_trello_credentials() -> tuple[str, str]:
    """
    Get the Trello API key and token.

    Returns:
        (api_key, api_token)

    Raises:
        ConfigurationError: If either variable is missing or blank.
    """
    api_key = os.environ.get(KEY_VAR, "").strip()
    api_token = os.environ.get(TOKEN_VAR, "").strip()

    missing = [name for name, value in ((KEY_VAR, api_key), (TOKEN_VAR, api_token)) if not value]
    if missing:
        raise ConfigurationError(f"Missing Trello credentials: set {', '.join(missing)}")

    return api_key, api_token
