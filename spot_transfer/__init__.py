"""
spot-transfer: Copy the tracks of one Spotify playlist into another.

A transfer reads every track of a source playlist, drops local files,
unavailable tracks and duplicates, optionally reverses the order, and
appends the result to an existing playlist or to a newly created one.

Architecture:
    The transfer runs as one pipeline with a per-run RunContext:

    EXTRACTING (utils/): Parse playlist URLs, URIs or ids
    AUTHENTICATING (spotify/auth.py): Exchange the refresh token
    COLLECTING (transfer/collector.py): Page through the source playlist
    BUILDING (transfer/builder.py): Deduplicate, reverse if requested
    RESOLVING (transfer/destination.py): Find or create the target playlist
    APPLYING (transfer/applier.py): Append in ordered batches of 100

Modules:
    core/       - Configuration, logging, exceptions, run context
    spotify/    - Spotify authorization, Web API adapter and models
    transfer/   - Pipeline stages
    utils/      - Playlist id parsing and batching helpers
    cli.py      - Command-line interface

Usage:
    Command Line:
        spot-transfer authorize
        spot-transfer copy "https://open.spotify.com/playlist/..."
        spot-transfer reverse "https://open.spotify.com/playlist/..." <target-id>

    Python API:
        from spot_transfer import CredentialProvider, TransferMode, load_config, run_transfer

        config = load_config()
        credentials = CredentialProvider(
            config.spotify.client_id,
            config.spotify.client_secret,
            config.spotify.redirect_uri
        )
        context, result = run_transfer(
            source_url, None, TransferMode.COPY, credentials,
            config.spotify.refresh_token
        )

Dependencies:
    - spotipy: Spotify Web API client and OAuth helpers
    - click / rich-click: CLI framework and colors
    - tqdm: Batch progress bar
    - pyyaml: Configuration file parsing
    - python-dotenv: .env loading for credentials
    - requests: Transport errors raised by spotipy
"""

__version__ = "0.1.0"
__author__ = "spot-transfer"
__license__ = "MIT"

# Convenience imports for common usage
from spot_transfer.core import (
    Config,
    ConfigError,
    RunContext,
    RunStage,
    SpotTransferError,
    TransferError,
    TransferMode,
    get_logger,
    load_config,
    setup_logging,
)
from spot_transfer.spotify import CredentialProvider, SpotifyCatalog
from spot_transfer.transfer import TransferPipeline, run_transfer

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    "RunContext",
    "RunStage",
    "TransferMode",
    # Exceptions
    "SpotTransferError",
    "ConfigError",
    "TransferError",
    # Spotify
    "CredentialProvider",
    "SpotifyCatalog",
    # Pipeline
    "TransferPipeline",
    "run_transfer",
]
