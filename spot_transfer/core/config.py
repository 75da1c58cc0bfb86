"""
Configuration management for spot-transfer.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml, with every Spotify
credential falling back to an environment variable.

The configuration contains:
    - Spotify API credentials (client_id, client_secret, redirect_uri)
    - The long-lived refresh token used to obtain access tokens
    - The directory where log files are written
    - Whether newly created playlists are public

Configuration File Location:
    config.yaml in the current working directory, unless --config is given.
    The file is optional when the environment provides the credentials.

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"
      redirect_uri: "http://127.0.0.1:5173/callback"
      refresh_token: "your_refresh_token_here"
      request_timeout: 10

    output:
      log_directory: "./logs"

    transfer:
      public: false

Environment Variables:
    SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET, SPOTIFY_REDIRECT_URI,
    SPOTIFY_REFRESH_TOKEN. The CLI loads a .env file into the environment
    before calling load_config().
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from spot_transfer.core.exceptions import ConfigError


# Default configuration file name (looked up in the current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:5173/callback"
DEFAULT_REQUEST_TIMEOUT = 10
DEFAULT_LOG_DIRECTORY = "logs"

# Config field -> environment variable fallback
ENV_VARS = {
    "client_id": "SPOTIFY_CLIENT_ID",
    "client_secret": "SPOTIFY_CLIENT_SECRET",
    "redirect_uri": "SPOTIFY_REDIRECT_URI",
    "refresh_token": "SPOTIFY_REFRESH_TOKEN",
}


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify API credentials configuration.

    Attributes:
        client_id: The Spotify application client ID.
        client_secret: The Spotify application client secret.
        redirect_uri: Redirect URI registered for the application. Used by
                      the authorize command and by the token refresh call.
        refresh_token: Long-lived refresh token, or None if the user has not
                       run `spot-transfer authorize` yet.
        request_timeout: Timeout in seconds for each Web API request.
    """
    client_id: str
    client_secret: str
    redirect_uri: str
    refresh_token: str | None
    request_timeout: int


@dataclass(frozen=True)
class OutputConfig:
    """
    Attributes:
        log_directory: Absolute path of the directory for log files.
    """
    log_directory: Path


@dataclass(frozen=True)
class TransferConfig:
    """
    Attributes:
        public: Visibility of playlists created by the transfer. Default False.
    """
    public: bool


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration, created by load_config().

    Example:
        config = load_config()
        print(f"Logging to: {config.output.log_directory}")
    """
    spotify: SpotifyConfig
    output: OutputConfig
    transfer: TransferConfig


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None
) -> Config:
    """
    Load and validate configuration from config.yaml and the environment.

    Args:
        config_path: Optional explicit path to the config file. If given,
                     the file must exist. If None, CWD/config.yaml is used
                     when present.
        environ: Mapping used for environment fallbacks. Defaults to
                 os.environ.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is missing, the YAML is
                     invalid, or a required value is missing or invalid.

    Behavior:
        1. Locate the config file (explicit path or CWD/config.yaml)
        2. Parse YAML (an absent default file counts as empty)
        3. Validate that every present section is a dictionary
        4. Merge spotify credentials with environment fallbacks
        5. Parse output and transfer sections with defaults
    """
    if environ is None:
        environ = os.environ

    if config_path is None:
        default_path = Path.cwd() / CONFIG_FILENAME
        raw_config = _read_config_file(default_path) if default_path.exists() else {}
    else:
        if not config_path.exists():
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        raw_config = _read_config_file(config_path)

    _validate_config(raw_config)

    return Config(
        spotify=_parse_spotify_config(raw_config.get("spotify") or {}, environ),
        output=_parse_output_config(raw_config.get("output") or {}),
        transfer=_parse_transfer_config(raw_config.get("transfer") or {})
    )


def _read_config_file(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file parses to None
    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return raw_config


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Check that every known section, when present, is a dictionary.

    Raises:
        ConfigError: If a section has the wrong type.
    """
    for section in ("spotify", "output", "transfer"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _string_field(
    section: dict[str, Any],
    name: str,
    environ: Mapping[str, str]
) -> str | None:
    """Return a stripped string from the section or its env var, or None."""
    value = section.get(name)
    if value is None:
        value = environ.get(ENV_VARS[name])
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(
            f"'spotify.{name}' must be a string",
            details={"field": f"spotify.{name}"}
        )
    return value.strip() or None


def _parse_spotify_config(
    spotify_section: dict[str, Any],
    environ: Mapping[str, str]
) -> SpotifyConfig:
    """
    Parse the Spotify section, filling gaps from the environment.

    Raises:
        ConfigError: If client_id or client_secret is missing, or
                     request_timeout is not a positive integer.
    """
    client_id = _string_field(spotify_section, "client_id", environ)
    client_secret = _string_field(spotify_section, "client_secret", environ)

    if client_id is None:
        raise ConfigError(
            "'spotify.client_id' is required (or set SPOTIFY_CLIENT_ID)",
            details={"field": "spotify.client_id"}
        )

    if client_secret is None:
        raise ConfigError(
            "'spotify.client_secret' is required (or set SPOTIFY_CLIENT_SECRET)",
            details={"field": "spotify.client_secret"}
        )

    redirect_uri = _string_field(spotify_section, "redirect_uri", environ)
    refresh_token = _string_field(spotify_section, "refresh_token", environ)

    timeout = spotify_section.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)
    # bool is an int subclass, reject it explicitly
    if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout < 1:
        raise ConfigError(
            "'spotify.request_timeout' must be a positive integer",
            details={"field": "spotify.request_timeout", "value": timeout}
        )

    return SpotifyConfig(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uri or DEFAULT_REDIRECT_URI,
        refresh_token=refresh_token,
        request_timeout=timeout
    )


def _parse_output_config(output_section: dict[str, Any]) -> OutputConfig:
    """
    Parse the output section. Expands ~ and makes the log directory absolute.
    Does NOT create the directory (setup_logging does).
    """
    directory = output_section.get("log_directory", DEFAULT_LOG_DIRECTORY)

    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'output.log_directory' must be a non-empty string",
            details={"field": "output.log_directory"}
        )

    return OutputConfig(log_directory=Path(directory.strip()).expanduser().resolve())


def _parse_transfer_config(transfer_section: dict[str, Any]) -> TransferConfig:
    public = transfer_section.get("public", False)

    if not isinstance(public, bool):
        raise ConfigError(
            "'transfer.public' must be true or false",
            details={"field": "transfer.public", "value": public}
        )

    return TransferConfig(public=public)
