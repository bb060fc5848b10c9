"""
Credential providers for authenticated calls.

The engine never reads tokens from ambient storage; a provider is passed
to whatever needs one.
"""
from abc import ABC, abstractmethod
from typing import Optional


class CredentialProvider(ABC):
    """Source of the bearer token for admin endpoints"""

    @abstractmethod
    def get_token(self) -> Optional[str]:
        pass

    @abstractmethod
    def clear_token(self) -> None:
        pass

    def set_token(self, token: str) -> None:
        raise NotImplementedError(f"{self.__class__.__name__} is read-only")


class StaticCredentialProvider(CredentialProvider):
    """Token held in memory (tests, service accounts)"""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None


class SettingsCredentialStore(CredentialProvider):
    """Token persisted in the local app_settings table"""

    TOKEN_KEY = "admin_token"

    def __init__(self, db):
        """
        Args:
            db: initialized LocalDatabase
        """
        self._db = db

    def get_token(self) -> Optional[str]:
        return self._db.get_setting(self.TOKEN_KEY)

    def set_token(self, token: str) -> None:
        self._db.set_setting(self.TOKEN_KEY, token)

    def clear_token(self) -> None:
        self._db.delete_setting(self.TOKEN_KEY)
