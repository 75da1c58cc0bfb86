"""
Spotify module for spot-transfer.

This module wraps the Spotify Web API:
    - auth: Refresh-token exchange and the one-off authorization flow
    - client: Catalog operations (read playlists, create, append)
    - models: Frozen dataclasses passed between pipeline stages

Usage:
    from spot_transfer.spotify import CredentialProvider, SpotifyCatalog

    access_token = CredentialProvider(client_id, client_secret, redirect_uri).refresh(token)
    catalog = SpotifyCatalog.from_access_token(access_token)
"""

from spot_transfer.spotify.auth import AuthorizationSession, CredentialProvider
from spot_transfer.spotify.client import SpotifyCatalog
from spot_transfer.spotify.models import (
    CatalogUser,
    CollectionReference,
    DestinationTarget,
    MemberItem,
    SourceCollection,
    TransferResult,
    TransferSet,
)

__all__ = [
    "AuthorizationSession",
    "CredentialProvider",
    "SpotifyCatalog",
    "CatalogUser",
    "CollectionReference",
    "DestinationTarget",
    "MemberItem",
    "SourceCollection",
    "TransferResult",
    "TransferSet",
]
