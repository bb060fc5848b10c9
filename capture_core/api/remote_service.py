"""
Client for the remote capture service

Endpoints:
    GET    /schema        -> {version, elements}
    POST   /sync          {records} -> {total, successful, results: {success, failed}}
    POST   /schema        {elements}              (authenticated)
    POST   /auth/login    {email, password} -> {token}
    GET    /members                                (authenticated)
    DELETE /members/{id}                           (authenticated)
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence
import logging

import requests

from capture_core.errors import AuthenticationError, RemoteError
from capture_core.schema.fields import FieldDefinition, Schema
from .base_connector import BaseAPIConnector

logger = logging.getLogger(__name__)


@dataclass
class SyncResponse:
    """Per-record outcome of POST /sync"""
    total: int
    successful: int
    success_ids: List[str] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, body: Any, submitted: int = 0) -> "SyncResponse":
        if not isinstance(body, dict) or not isinstance(body.get("results"), dict):
            raise RemoteError("Sync response has no results section", endpoint="sync")

        results = body["results"]
        success_ids = [
            str(item["id"]) for item in results.get("success") or []
            if isinstance(item, dict) and item.get("id") is not None
        ]
        failed = [
            {"id": str(item.get("id")), "reason": item.get("reason")}
            for item in results.get("failed") or []
            if isinstance(item, dict)
        ]
        return cls(
            total=int(body.get("total", submitted)),
            successful=int(body.get("successful", len(success_ids))),
            success_ids=success_ids,
            failed=failed,
        )


class RemoteServiceClient(BaseAPIConnector):
    """
    Usage:
        client = RemoteServiceClient(settings.api_config(), credentials=store)
        schema = client.fetch_schema()
        response = client.submit_records(record_store.list_pending())
    """

    def validate_response(self, response: requests.Response) -> Any:
        """Decode a JSON body or raise RemoteError"""
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(
                f"{self.config.api_name} returned a non-JSON body",
                status_code=response.status_code,
            ) from e

    # =========================================================================
    # SYNC ENGINE ENDPOINTS
    # =========================================================================

    def fetch_schema(self) -> Schema:
        """
        Raises:
            ConnectivityError, RemoteError, SchemaFormatError
        """
        body = self.validate_response(self._make_request("schema"))
        schema = Schema.from_dict(body)
        logger.debug(f"Fetched schema v{schema.version} with {len(schema.fields)} fields")
        return schema

    def submit_records(self, records: Sequence) -> SyncResponse:
        """Send the whole batch in one POST /sync"""
        payload = {"records": [record.to_wire() for record in records]}
        body = self.validate_response(self._make_request("sync", method="POST", data=payload))
        return SyncResponse.from_dict(body, submitted=len(records))

    # =========================================================================
    # ADMIN ENDPOINTS
    # =========================================================================

    def update_schema(self, elements: Iterable[Any]) -> Dict[str, Any]:
        """Publish a new field list; the service assigns the next version"""
        payload = {
            "elements": [
                e.to_dict() if isinstance(e, FieldDefinition) else e
                for e in elements
            ]
        }
        return self.validate_response(
            self._make_request("schema", method="POST", data=payload, authenticated=True)
        )

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Authenticate and hand the token to the credential provider"""
        body = self.validate_response(
            self._make_request("auth/login", method="POST", data={"email": email, "password": password})
        )
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise AuthenticationError("Login response carried no token", endpoint="auth/login")
        if self.credentials is not None:
            self.credentials.set_token(token)
        return body

    def logout(self) -> None:
        if self.credentials is not None:
            self.credentials.clear_token()

    def fetch_members(self) -> List[Dict[str, Any]]:
        body = self.validate_response(self._make_request("members", authenticated=True))
        if isinstance(body, dict):
            body = body.get("members", [])
        return list(body or [])

    def delete_member(self, record_id: str) -> Dict[str, Any]:
        return self.validate_response(
            self._make_request(f"members/{record_id}", method="DELETE", authenticated=True)
        )

    def test_connection(self) -> Dict[str, Any]:
        """
        Test API connection and return status

        Returns:
            Dict with status, message, and schema version
        """
        try:
            schema = self.fetch_schema()
            return {
                "status": "success",
                "message": f"Successfully connected to {self.config.api_name}",
                "schema_version": schema.version,
                "fields": len(schema.fields),
            }
        except Exception as e:
            return {
                "status": "error",
                "message": f"Connection failed: {str(e)}"
            }
