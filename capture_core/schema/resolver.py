# =============================================================================
# capture_core/schema/resolver.py
# Three-tier Schema Resolution (remote -> cache -> default)
# =============================================================================
"""
SchemaResolver - picks exactly one whole schema to render.

Order is fixed:
    1. Probe reachable and remote fetch succeeds -> remote (cached on the way)
    2. Otherwise a cached schema, if any
    3. Otherwise the embedded default

resolve() never raises; every failure degrades to the next tier.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
import logging

from capture_core.errors import safe_execute
from .defaults import default_schema
from .fields import Schema

logger = logging.getLogger(__name__)


class SchemaSource(Enum):
    """Where the active schema came from."""
    REMOTE = "remote"
    CACHE = "cache"
    DEFAULT = "default"


@dataclass(frozen=True)
class ResolvedSchema:
    schema: Schema
    source: SchemaSource


class SchemaResolver:
    """
    Usage:
        resolver = SchemaResolver(client, schema_cache, connection.is_reachable)
        resolved = resolver.resolve()
        render(resolved.schema)
    """

    def __init__(self, client, cache, probe: Callable[[], bool]):
        """
        Args:
            client: object with fetch_schema() -> Schema
            cache: object with put(version, elements) and get() -> Optional[Schema]
            probe: connectivity check, True when the service is reachable
        """
        self._client = client
        self._cache = cache
        self._probe = probe

    def _reachable(self) -> bool:
        try:
            return bool(self._probe())
        except Exception as e:
            logger.warning(f"Connectivity probe failed, treating as offline: {e}")
            return False

    def _fetch_remote(self) -> Optional[Schema]:
        try:
            schema = self._client.fetch_schema()
        except Exception as e:
            logger.warning(f"Remote schema fetch failed, falling back: {e}")
            return None

        try:
            self._cache.put(schema.version, schema.fields)
        except Exception as e:
            logger.error(f"Could not cache schema v{schema.version}: {e}")
        return schema

    def resolve(self) -> ResolvedSchema:
        if self._reachable():
            schema = self._fetch_remote()
            if schema is not None:
                logger.info(f"Using remote schema v{schema.version} ({len(schema.fields)} fields)")
                return ResolvedSchema(schema, SchemaSource.REMOTE)
        else:
            logger.info("Service unreachable, skipping remote schema fetch")

        cached = safe_execute(self._cache.get, default=None)
        if cached is not None:
            logger.info(f"Using cached schema v{cached.version}")
            return ResolvedSchema(cached, SchemaSource.CACHE)

        logger.info("No cached schema, using built-in default")
        return ResolvedSchema(default_schema(), SchemaSource.DEFAULT)
