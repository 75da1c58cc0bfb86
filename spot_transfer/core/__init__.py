"""
Core module for spot-transfer.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs
    - context: Per-run state and the run stage machine

Usage:
    from spot_transfer.core import (
        Config, load_config,
        setup_logging, get_logger,
        RunContext, TransferMode,
        SpotTransferError, TransferError
    )
"""

from spot_transfer.core.config import (
    Config,
    OutputConfig,
    SpotifyConfig,
    TransferConfig,
    load_config,
)
from spot_transfer.core.context import RunContext, RunStage, TransferMode
from spot_transfer.core.exceptions import (
    AuthError,
    BatchApplyError,
    ConfigError,
    DestinationCreateError,
    InvalidIdentifier,
    RunStateError,
    SourceFetchError,
    SpotifyError,
    SpotTransferError,
    TargetNotFoundError,
    TransferError,
)
from spot_transfer.core.logger import (
    get_logger,
    log_uncommitted_tracks,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "OutputConfig",
    "TransferConfig",
    "load_config",
    # Context
    "RunContext",
    "RunStage",
    "TransferMode",
    # Exceptions
    "SpotTransferError",
    "ConfigError",
    "SpotifyError",
    "RunStateError",
    "TransferError",
    "InvalidIdentifier",
    "AuthError",
    "SourceFetchError",
    "TargetNotFoundError",
    "DestinationCreateError",
    "BatchApplyError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_uncommitted_tracks",
    "shutdown_logging",
]
