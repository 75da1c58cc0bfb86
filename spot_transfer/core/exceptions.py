"""
Exception classes for spot-transfer.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary, so the CLI can print a short diagnostic while the log files
keep the full context.

Exception Hierarchy:
    SpotTransferError (base)
        ConfigError - Configuration file / environment issues
        SpotifyError - A single Spotify Web API call failed
        RunStateError - Illegal run stage transition
        TransferError - Terminal failure of a transfer run
            InvalidIdentifier - Input is neither a playlist id nor URL
            AuthError - Refresh token could not be exchanged
            SourceFetchError - Source playlist could not be read
            TargetNotFoundError - Explicit target playlist unreachable
            DestinationCreateError - New target playlist could not be created
            BatchApplyError - An append call failed mid-transfer

Every TransferError is terminal for its run. Nothing is retried.
"""

from typing import Any


class SpotTransferError(Exception):
    """
    Base exception for all spot-transfer errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (ids, offsets, ...).

    Example:
        try:
            run_transfer(...)
        except SpotTransferError as e:
            logger.error(f"Transfer failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'playlist_id': Spotify playlist involved in the error
                     - 'original_error': The underlying exception text
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SpotTransferError):
    """
    Raised when the configuration is missing or invalid.

    Common causes:
        - config.yaml has invalid YAML syntax
        - client_id / client_secret missing from both file and environment
        - A section is not a mapping, or a field has the wrong type
    """
    pass


class SpotifyError(SpotTransferError):
    """
    Raised by the catalog adapter when a Spotify Web API call fails.

    Pipeline stages never let this escape as-is: they translate it into
    the TransferError subclass matching the stage that failed.

    Attributes:
        http_status: HTTP status of the failed call, or None for
                     transport-level failures (DNS, connection reset, ...).
        api_error: Structured error payload returned by Spotify
                   ({'status': ..., 'message': ..., 'reason': ...}), or None.
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        http_status: int | None = None,
        api_error: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.http_status = http_status
        self.api_error = api_error


class RunStateError(SpotTransferError):
    """Raised on an illegal transition of the run state machine."""
    pass


class TransferError(SpotTransferError):
    """
    Base class for the terminal failures of a transfer run.

    Subclasses set `kind`, which is recorded on the run context when the
    run moves to the FAILED stage.

    Attributes:
        kind: Short machine-readable failure kind.
        api_error: Structured Spotify error payload when the failure came
                   from the API, otherwise None.
    """

    kind = "transfer"

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        api_error: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.api_error = api_error

    @classmethod
    def from_spotify_error(
        cls,
        message: str,
        error: SpotifyError,
        details: dict | None = None
    ) -> "TransferError":
        """Wrap an adapter-level SpotifyError, keeping its API payload."""
        merged = dict(details or {})
        merged["original_error"] = error.message
        if error.http_status is not None:
            merged["http_status"] = error.http_status
        return cls(message, details=merged, api_error=error.api_error)


class InvalidIdentifier(TransferError):
    """
    Raised when a string is neither a bare playlist id nor a playlist URL/URI.

    Example:
        raise InvalidIdentifier(
            "Could not parse playlist ID from input: 'hello world'",
            details={"input": "hello world"}
        )
    """

    kind = "invalid_identifier"


class AuthError(TransferError):
    """
    Raised when the stored refresh token cannot be exchanged for an
    access token. Reported before any catalog call is made.
    """

    kind = "auth"


class SourceFetchError(TransferError):
    """
    Raised when the source playlist (metadata or any page of its items)
    cannot be read. No partial track list is ever returned.
    """

    kind = "source_fetch"


class TargetNotFoundError(TransferError):
    """
    Raised when an explicitly supplied target playlist cannot be fetched
    (wrong id, no access, ...).
    """

    kind = "target_not_found"


class DestinationCreateError(TransferError):
    """
    Raised when a new target playlist cannot be created.

    The message tells the operator to create a playlist manually and
    re-run with its id as the target argument.
    """

    kind = "destination_create"


class BatchApplyError(TransferError):
    """
    Raised when appending one batch to the target playlist fails.

    Batches applied before the failure stay in the target playlist.

    Attributes:
        failed_index: 1-based index of the batch that failed.
        committed: Number of tracks added by the earlier, successful batches.

    Example:
        # batch 2 of 3 failed after the first 100 tracks were added
        raise BatchApplyError(
            "Failed to add batch 2/3",
            failed_index=2,
            committed=100
        )
    """

    kind = "batch_apply"

    def __init__(
        self,
        message: str,
        failed_index: int,
        committed: int,
        details: dict | None = None,
        api_error: dict[str, Any] | None = None
    ) -> None:
        merged = dict(details or {})
        merged.setdefault("failed_index", failed_index)
        merged.setdefault("committed", committed)
        super().__init__(message, details=merged, api_error=api_error)
        self.failed_index = failed_index
        self.committed = committed
