"""
Command-line interface for spot-transfer.

This module implements the CLI using Click; rich-click is used for the
help output colors.

Commands:
    spot-transfer authorize                   Obtain a refresh token
    spot-transfer copy <source> [target]      Copy a playlist
    spot-transfer reverse <source> [target]   Copy a playlist in reverse order

    <source> and [target] accept a playlist URL, a spotify:playlist: URI
    or a bare playlist id. Without [target] a new private playlist is
    created, named after the source.

Options:
    --config <config.yaml>                    Configuration file to use
    --version                                 Show version and exit

Usage:
    # One-time setup: print a refresh token to store in .env
    spot-transfer authorize

    # Copy into a new playlist
    spot-transfer copy "https://open.spotify.com/playlist/..."

    # Reverse into an existing playlist
    spot-transfer reverse "https://open.spotify.com/playlist/..." 3AbCdEf...

Exit Codes:
    0   success
    1   configuration or unexpected error
    2   usage error / invalid playlist identifier
    3   authentication failed
    4   source playlist unreadable, or target playlist unavailable
    5   a batch could not be added (earlier batches stay applied)
    130 interrupted
"""

import json
import sys
from functools import partial
from pathlib import Path
from typing import Optional

import rich_click as click
from dotenv import load_dotenv

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.MAX_WIDTH = 100

from spot_transfer import __version__
from spot_transfer.core import (
    BatchApplyError,
    Config,
    ConfigError,
    DestinationCreateError,
    SpotTransferError,
    TransferError,
    TransferMode,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from spot_transfer.spotify import AuthorizationSession, CredentialProvider, SpotifyCatalog
from spot_transfer.transfer import run_transfer

logger = get_logger(__name__)


# TransferError.kind -> process exit status
EXIT_CODES = {
    "invalid_identifier": 2,
    "auth": 3,
    "source_fetch": 4,
    "target_not_found": 4,
    "destination_create": 4,
    "batch_apply": 5,
}


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml if present)"
)
@click.version_option(__version__, prog_name="spot-transfer")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]) -> None:
    """
    spot-transfer: Copy the tracks of one Spotify playlist into another.

    Local files, unavailable tracks and duplicates are skipped. Tracks are
    added in batches of 100, in order.

    \b
    SETUP:
        spot-transfer authorize               # prints SPOTIFY_REFRESH_TOKEN

    \b
    TRANSFER:
        spot-transfer copy <source> [target]
        spot-transfer reverse <source> [target]
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("source")
@click.argument("target", required=False)
@click.pass_context
def copy(ctx: click.Context, source: str, target: Optional[str]) -> None:
    """Copy SOURCE into TARGET, or into a new playlist."""
    _run(ctx.obj, "copy", source, target, TransferMode.COPY)


@cli.command()
@click.argument("source")
@click.argument("target", required=False)
@click.pass_context
def reverse(ctx: click.Context, source: str, target: Optional[str]) -> None:
    """Copy SOURCE into TARGET (or a new playlist) in reverse order."""
    _run(ctx.obj, "reverse", source, target, TransferMode.REVERSED)


@cli.command()
@click.option(
    "--no-browser",
    is_flag=True,
    help="Print the authorization URL instead of opening a browser"
)
@click.pass_context
def authorize(ctx: click.Context, no_browser: bool) -> None:
    """Authorize spot-transfer and print a refresh token."""
    try:
        config = _load_configuration(ctx.obj.get("config_path"))
        setup_logging(config.output.log_directory)

        session = AuthorizationSession(
            client_id=config.spotify.client_id,
            client_secret=config.spotify.client_secret,
            redirect_uri=config.spotify.redirect_uri
        )
        refresh_token = session.authorize(open_browser=not no_browser)

        click.echo("\nSave this refresh token to your .env as SPOTIFY_REFRESH_TOKEN:\n")
        click.echo(refresh_token)

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except TransferError as e:
        _report_transfer_error(e)
        sys.exit(EXIT_CODES.get(e.kind, 1))

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    finally:
        shutdown_logging()


def _run(
    options: dict,
    command: str,
    source: str,
    target: Optional[str],
    mode: TransferMode
) -> None:
    """
    Execute one transfer and map failures to exit codes.

    Args:
        options: Dictionary with CLI options from click context.
        command: Sub-command name, used in the re-run hint.
        source: Source playlist input.
        target: Target playlist input, or None.
        mode: Transfer mode.

    Raises:
        SystemExit: On any failure (with the exit code for its kind).
    """
    try:
        config = _load_configuration(options.get("config_path"))

        setup_logging(config.output.log_directory)
        logger.info("spot-transfer starting")

        context, result = run_transfer(
            source_input=source,
            target_input=target,
            mode=mode,
            credentials=_credential_provider(config),
            refresh_token=config.spotify.refresh_token,
            catalog_factory=partial(
                SpotifyCatalog.from_access_token,
                request_timeout=config.spotify.request_timeout
            ),
            public=config.transfer.public,
            show_progress=sys.stderr.isatty()
        )

        if result.destination is None:
            click.echo("No valid tracks found to transfer.")
        else:
            click.echo(
                f"Added {result.committed} tracks to {result.destination} "
                f"in {result.batches} batches"
            )
            if result.transfer_set.duplicates_removed:
                click.echo(f"Skipped {result.transfer_set.duplicates_removed} duplicate tracks")

        logger.info(f"[{context.run_id}] spot-transfer completed successfully")

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except TransferError as e:
        _report_transfer_error(e)
        if isinstance(e, DestinationCreateError):
            click.echo(f"spot-transfer {command} {source} YOUR_TARGET_PLAYLIST_ID", err=True)
        logger.error(f"Transfer error: {e.message}", exc_info=True)
        sys.exit(EXIT_CODES.get(e.kind, 1))

    except SpotTransferError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        shutdown_logging()


def _load_configuration(config_path: Optional[Path]) -> Config:
    """
    Load .env into the environment, then the configuration.

    Raises:
        ConfigError: If configuration is invalid or missing.
    """
    load_dotenv()
    return load_config(config_path)


def _credential_provider(config: Config) -> CredentialProvider:
    return CredentialProvider(
        client_id=config.spotify.client_id,
        client_secret=config.spotify.client_secret,
        redirect_uri=config.spotify.redirect_uri
    )


def _report_transfer_error(error: TransferError) -> None:
    """Print the diagnostic for a failed run, with the API payload if any."""
    click.echo(f"Error: {error.message}", err=True)

    if isinstance(error, BatchApplyError):
        click.echo(
            f"Batch {error.failed_index} failed; {error.committed} tracks were already added.",
            err=True
        )

    if error.api_error:
        click.echo(f"API error details: {json.dumps(error.api_error, indent=2)}", err=True)


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `spot-transfer` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
