# =============================================================================
# capture_core/services/admin_service.py
# Admin Service - Authentication, Schema Publishing, Remote Members
# =============================================================================

from __future__ import annotations
from typing import Any, Iterable, Optional, Union

from capture_core.api.credentials import CredentialProvider
from capture_core.api.remote_service import RemoteServiceClient
from capture_core.schema import SchemaBuilder
from .base_service import BaseService, ServiceResult
from . import members


class AdminService(BaseService):
    """
    Service for the admin side of the app. Every call except login() needs
    a token held by the credential provider.

    Usage:
        admin = AdminService(client, credentials)
        admin.login("admin@example.org", "secret")
        builder = SchemaBuilder.from_schema(capture.schema)
        builder.add_field("Baptism Date", "date")
        admin.save_schema(builder)
    """

    def __init__(self, client: RemoteServiceClient, credentials: Optional[CredentialProvider] = None):
        super().__init__()
        self._client = client
        self._credentials = credentials if credentials is not None else client.credentials

    @property
    def is_authenticated(self) -> bool:
        return bool(self._credentials and self._credentials.get_token())

    def login(self, email: str, password: str) -> ServiceResult:
        result = self.safe_execute("Admin login", self._client.login, email, password)
        if result:
            # Never hand the token back to callers
            result.data = {"authenticated": True}
        return result

    def logout(self) -> ServiceResult:
        return self.safe_execute("Admin logout", self._client.logout)

    def save_schema(self, elements: Union[SchemaBuilder, Iterable[Any]]) -> ServiceResult:
        """Publish a field list (or a builder's fields) with POST /schema."""
        if isinstance(elements, SchemaBuilder):
            elements = elements.elements()
        return self.safe_execute("Publishing schema", self._client.update_schema, list(elements))

    def list_remote_members(self, search: Optional[str] = None) -> ServiceResult:
        """Members on the server; `search` matches name or phone."""
        return self.safe_execute(
            "Fetching remote members",
            lambda: members.search_members(self._client.fetch_members(), search),
        )

    def member_stats(self) -> ServiceResult:
        """Dashboard counts over the remote members (total, baptized, working, married)."""
        return self.safe_execute(
            "Computing member statistics",
            lambda: members.member_stats(self._client.fetch_members()),
        )

    def delete_remote_member(self, record_id: str) -> ServiceResult:
        return self.safe_execute(f"Deleting remote member {record_id}", self._client.delete_member, record_id)
