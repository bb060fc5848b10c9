"""
Remote service access for the capture engine
"""
from .base_connector import APIConfig, BaseAPIConnector
from .credentials import CredentialProvider, StaticCredentialProvider, SettingsCredentialStore
from .remote_service import RemoteServiceClient, SyncResponse

__all__ = [
    "APIConfig",
    "BaseAPIConnector",
    "CredentialProvider",
    "StaticCredentialProvider",
    "SettingsCredentialStore",
    "RemoteServiceClient",
    "SyncResponse",
]
