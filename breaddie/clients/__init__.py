"""HTTP clients for the hosted auth and storage REST APIs."""

from breaddie.clients.auth import AuthSession, HostedAuthClient
from breaddie.clients.base import HostedServiceError
from breaddie.clients.storage import StorageClient, StoredObject

__all__ = [
    "AuthSession",
    "HostedAuthClient",
    "HostedServiceError",
    "StorageClient",
    "StoredObject",
]
