# =============================================================================
# capture_core/services/capture_service.py
# Capture Service - Form Rendering and Local Submission
# =============================================================================

from __future__ import annotations
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional

from capture_core.offline.record_store import RecordStore
from capture_core.schema import (
    FieldDefinition,
    ResolvedSchema,
    Schema,
    SchemaResolver,
    default_schema,
    prepare_submission,
    visible_fields,
)
from .base_service import BaseService, ServiceResult
from .members import search_members


class CaptureService(BaseService):
    """
    Service for the data-entry side of the app.

    Handles:
    - Resolving the schema to render (remote, cache or default)
    - Visible fields for the current answers
    - Validating and saving a submission locally (always pending)
    - Listing and deleting local records

    Usage:
        service = CaptureService(resolver, store)
        service.load_schema()
        result = service.submit({"firstName": "Ama", "lastName": "Mensah"})
        if not result:
            print(result.error)   # "Please fill in: ..."
    """

    def __init__(
        self,
        resolver: SchemaResolver,
        store: RecordStore,
        today: Callable[[], date] = date.today,
    ):
        super().__init__()
        self._resolver = resolver
        self._store = store
        self._today = today
        self._resolved: Optional[ResolvedSchema] = None

    @property
    def schema(self) -> Schema:
        """Schema from the last load_schema(), or the built-in default."""
        return self._resolved.schema if self._resolved else default_schema()

    @property
    def resolved(self) -> Optional[ResolvedSchema]:
        return self._resolved

    def load_schema(self) -> ServiceResult:
        """
        Resolve the schema to render.

        Returns:
            ServiceResult with the ResolvedSchema; metadata carries its source
        """
        resolved = self._resolver.resolve()
        self._resolved = resolved
        return ServiceResult.ok(resolved, source=resolved.source.value, version=resolved.schema.version)

    def visible_fields(self, values: Mapping[str, Any]) -> List[FieldDefinition]:
        return visible_fields(self.schema, values)

    def submit(self, values: Mapping[str, Any], schema: Optional[Schema] = None) -> ServiceResult:
        """
        Validate form values and store them as a pending record.

        Args:
            values: raw form values; an "id" key edits that record
            schema: schema the form was rendered from (defaults to self.schema)

        Returns:
            ServiceResult with the stored Record. A validation failure returns
            error_code FORM_001 and result.missing_labels; nothing is stored.
            A storage failure comes back retryable.
        """
        return self.safe_execute("Saving record locally", self._save, schema or self.schema, values)

    def _save(self, schema: Schema, values: Mapping[str, Any]):
        final = prepare_submission(schema, values, self._today())
        return self._store.upsert(final)

    def list_records(self, pending_only: bool = False, search: Optional[str] = None) -> ServiceResult:
        """Local records, newest first; `search` matches name or phone."""
        loader = self._store.list_pending if pending_only else self._store.list_all
        return self.safe_execute(
            "Listing pending records" if pending_only else "Listing records",
            lambda: search_members(loader(), search),
        )

    def list_pending(self) -> ServiceResult:
        return self.list_records(pending_only=True)

    def delete_record(self, record_id: str) -> ServiceResult:
        """Remove a local record; data is False when the id was unknown."""
        return self.safe_execute(f"Deleting record {record_id}", self._store.remove, record_id)

    def records_frame(self, pending_only: bool = False) -> ServiceResult:
        """Local records as a pandas DataFrame (one column per field)."""
        return self.safe_execute("Building records table", self._store.to_dataframe, pending_only)

    def summary(self) -> Dict[str, Any]:
        return {
            "schema_source": self._resolved.source.value if self._resolved else None,
            "schema_version": self.schema.version,
            "fields": len(self.schema.fields),
        }
