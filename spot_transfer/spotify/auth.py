"""
Spotify authorization for spot-transfer.

Two pieces live here:

    CredentialProvider
        Exchanges the stored long-lived refresh token for a short-lived
        access token. Every transfer run calls refresh() once, before any
        catalog access.

    AuthorizationSession
        One-off authorization-code flow used by `spot-transfer authorize`
        to obtain that refresh token. The browser is sent to Spotify's
        consent page and the callback is checked against the session's
        own random `state` nonce.

Both are thin layers over spotipy.oauth2.SpotifyOAuth with an in-memory
token cache, so nothing is written to disk.
"""

import secrets
from dataclasses import dataclass, field

import requests
import spotipy
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from spot_transfer.core.exceptions import AuthError
from spot_transfer.core.logger import get_logger

logger = get_logger(__name__)


# Scopes needed to read private playlists and write the target playlist
SCOPES = [
    "playlist-read-private",
    "playlist-modify-private",
    "playlist-modify-public",
]


def _oauth_error_payload(error: Exception) -> dict | None:
    if isinstance(error, SpotifyOauthError):
        return {
            "error": getattr(error, "error", None),
            "error_description": getattr(error, "error_description", None),
        }
    if isinstance(error, spotipy.SpotifyException):
        return {"status": error.http_status, "message": error.msg}
    return None


class CredentialProvider:
    """
    Turns a refresh token into a bearer token.

    Attributes:
        _oauth: SpotifyOAuth manager configured with the app credentials.

    Example:
        provider = CredentialProvider(client_id, client_secret, redirect_uri)
        access_token = provider.refresh(refresh_token)
    """

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str) -> None:
        self._oauth = SpotifyOAuth(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scope=SCOPES,
            cache_handler=MemoryCacheHandler(),
            open_browser=False
        )

    def refresh(self, refresh_token: str | None) -> str:
        """
        Exchange a refresh token for an access token.

        Args:
            refresh_token: Token obtained with `spot-transfer authorize`.

        Returns:
            The access token string.

        Raises:
            AuthError: If no refresh token is configured, Spotify rejects
                       the exchange, or a network error occurs.
        """
        if not refresh_token:
            raise AuthError(
                "No refresh token configured. Run 'spot-transfer authorize' "
                "and store the token as SPOTIFY_REFRESH_TOKEN."
            )

        logger.info("Refreshing access token...")
        try:
            token_info = self._oauth.refresh_access_token(refresh_token)
        except (SpotifyOauthError, spotipy.SpotifyException, requests.RequestException) as e:
            raise AuthError(
                f"Failed to refresh access token: {e}",
                details={"original_error": str(e)},
                api_error=_oauth_error_payload(e)
            ) from e

        access_token = (token_info or {}).get("access_token")
        if not access_token:
            raise AuthError("Token endpoint returned no access token")

        logger.info("Access token refreshed successfully")
        return access_token


@dataclass
class AuthorizationSession:
    """
    One authorization-code flow.

    The state nonce is generated per session and checked by spotipy when
    the callback arrives (SpotifyStateError on mismatch).

    Attributes:
        client_id: Spotify application client ID.
        client_secret: Spotify application client secret.
        redirect_uri: Registered redirect URI. A loopback URI with a port
                      (e.g. http://127.0.0.1:5173/callback) makes spotipy
                      serve the callback itself; otherwise the user pastes
                      the redirected URL into the terminal.
        state: Random nonce sent with the authorize request.
    """
    client_id: str
    client_secret: str
    redirect_uri: str
    state: str = field(default_factory=lambda: secrets.token_hex(16))

    def authorize(self, open_browser: bool = True) -> str:
        """
        Run the flow and return the refresh token.

        Raises:
            AuthError: On state mismatch, denied consent, or a failed
                       code exchange.
        """
        cache_handler = MemoryCacheHandler()
        oauth = SpotifyOAuth(
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.redirect_uri,
            scope=SCOPES,
            state=self.state,
            cache_handler=cache_handler,
            open_browser=open_browser,
            show_dialog=True
        )

        logger.info(f"Waiting for authorization callback on {self.redirect_uri}")
        try:
            code = oauth.get_auth_response()
            oauth.get_access_token(code, as_dict=False, check_cache=False)
        except (SpotifyOauthError, spotipy.SpotifyException, requests.RequestException) as e:
            raise AuthError(
                f"Authorization failed: {e}",
                details={"original_error": str(e)},
                api_error=_oauth_error_payload(e)
            ) from e

        token_info = cache_handler.get_cached_token() or {}
        refresh_token = token_info.get("refresh_token")
        if not refresh_token:
            raise AuthError("Authorization succeeded but no refresh token was returned")

        return refresh_token
