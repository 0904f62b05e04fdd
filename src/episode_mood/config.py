"""
Episode Mood Configuration

Loads the JSON configuration file once at startup. The file uses the
camelCase keys of the deployed config.json:

    {
        "certFile": "/etc/pki/client.crt",
        "keyFile": "/etc/pki/client.key",
        "spotifyClientId": "...",
        "spotifyClientSecret": "...",
        "musicUrl": "https://music.example/api/records/%s",
        "iblUrl": "https://ibl.example/ibl/v1/episodes/%s",
        "playlisterUrl": "https://playlister.example/versions/%s/segments"
    }

Environment Variables:
    EPISODE_MOOD_CONFIG: Path to the config file (default ./config.json)
    SPOTIFY_CLIENT_ID: Used when spotifyClientId is absent from the file
    SPOTIFY_CLIENT_SECRET: Used when spotifyClientSecret is absent from the file
"""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "./config.json"
DEFAULT_TIMEOUT = 30.0

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_URL = "https://api.spotify.com/v1"

URL_PLACEHOLDER = "%s"


@dataclass(frozen=True)
class MoodConfig:
    """Configuration for one pipeline run."""

    cert_file: str
    key_file: str
    spotify_client_id: str
    spotify_client_secret: str
    music_url: str
    ibl_url: str
    playlister_url: str
    spotify_token_url: str = SPOTIFY_TOKEN_URL
    spotify_api_url: str = SPOTIFY_API_URL
    timeout: float = DEFAULT_TIMEOUT


def format_url(template: str, identifier: str) -> str:
    """Substitute an identifier into a ``%s`` URL template."""
    return template.replace(URL_PLACEHOLDER, quote(identifier, safe=""), 1)


def _require(raw: Dict[str, Any], key: str, env_var: Optional[str] = None) -> str:
    value = raw.get(key)
    if not value and env_var:
        value = os.getenv(env_var)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"Config incomplete: {key} is missing", config_key=key)
    return value


def _require_template(raw: Dict[str, Any], key: str) -> str:
    template = _require(raw, key)
    if URL_PLACEHOLDER not in template:
        raise ConfigurationError(
            f"Config invalid: {key} must contain a {URL_PLACEHOLDER} placeholder",
            config_key=key,
        )
    return template


def config_from_dict(raw: Dict[str, Any]) -> MoodConfig:
    """
    Build and validate a MoodConfig from decoded JSON.

    Each required field is checked on its own so the error names it.

    Raises:
        ConfigurationError: If a required field is missing or invalid.
    """
    timeout = raw.get("timeout", DEFAULT_TIMEOUT)
    numeric = isinstance(timeout, (int, float)) and not isinstance(timeout, bool)
    if not numeric or not math.isfinite(timeout) or timeout <= 0:
        raise ConfigurationError("Config invalid: timeout must be a positive finite number", config_key="timeout")

    return MoodConfig(
        cert_file=_require(raw, "certFile"),
        key_file=_require(raw, "keyFile"),
        spotify_client_id=_require(raw, "spotifyClientId", "SPOTIFY_CLIENT_ID"),
        spotify_client_secret=_require(raw, "spotifyClientSecret", "SPOTIFY_CLIENT_SECRET"),
        music_url=_require_template(raw, "musicUrl"),
        ibl_url=_require_template(raw, "iblUrl"),
        playlister_url=_require_template(raw, "playlisterUrl"),
        spotify_token_url=raw.get("spotifyTokenUrl") or SPOTIFY_TOKEN_URL,
        spotify_api_url=(raw.get("spotifyApiUrl") or SPOTIFY_API_URL).rstrip("/"),
        timeout=float(timeout),
    )


def load_config(path: Optional[str | Path] = None) -> MoodConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: Config file path. Defaults to $EPISODE_MOOD_CONFIG, then ./config.json.

    Returns:
        Validated MoodConfig.

    Raises:
        ConfigurationError: If the file is unreadable, not JSON, or incomplete.
    """
    config_path = Path(path or os.getenv("EPISODE_MOOD_CONFIG") or DEFAULT_CONFIG_PATH)
    logger.debug(f"Loading config from {config_path}")

    try:
        with open(config_path) as f:
            raw = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e.strerror}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file {config_path} is not valid JSON: {e.msg}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a JSON object")

    return config_from_dict(raw)
