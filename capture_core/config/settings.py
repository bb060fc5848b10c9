# =============================================================================
# capture_core/config/settings.py
# Runtime Settings (.env + TOML secrets + environment overrides)
# =============================================================================
"""
Settings - one place for every tunable of the capture engine.

Resolution order (later wins):
    1. Dataclass defaults
    2. [capture] section of a TOML secrets file
    3. CAPTURE_* environment variables (optionally loaded from a .env file)

Usage:
    settings = load_settings(secrets_path=Path(".secrets/capture.toml"))
    runtime = CaptureRuntime.from_settings(settings)
"""

from __future__ import annotations
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse
import logging

import toml
from dotenv import load_dotenv

from capture_core.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CAPTURE_"
TOML_SECTION = "capture"


@dataclass(frozen=True)
class Settings:
    """Configuration for storage, remote service and sync timing."""
    db_path: Path = Path("local_data") / "capture.db"
    api_base_url: str = "http://localhost:5000/api"
    request_timeout: float = 10.0       # Bound on every remote call
    sync_debounce_seconds: float = 0.5  # Delay before auto-sync after reconnect
    probe_timeout: float = 5.0
    check_interval_online: float = 30.0
    check_interval_offline: float = 10.0
    log_level: str = "INFO"

    @property
    def api_host(self) -> Optional[str]:
        return urlparse(self.api_base_url).hostname

    @property
    def api_port(self) -> int:
        parsed = urlparse(self.api_base_url)
        if parsed.port:
            return parsed.port
        return 443 if parsed.scheme == "https" else 80

    def api_config(self):
        """Build the APIConfig for the remote service client."""
        from capture_core.api.base_connector import APIConfig

        return APIConfig(
            api_name="capture-service",
            base_url=self.api_base_url.rstrip("/"),
            timeout=self.request_timeout,
        )


def _coerce(name: str, raw: Any, template: Any) -> Any:
    """Convert a raw config value to the type of the default."""
    try:
        if isinstance(template, Path):
            return Path(raw)
        if isinstance(template, float):
            value = float(raw)
            if value < 0:
                raise ValueError("must not be negative")
            return value
        return str(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value for {name}: {raw!r} ({e})",
            config_key=name,
            expected_type=type(template).__name__,
        )


def load_settings(
    secrets_path: Optional[Path] = None,
    env_file: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    """
    Load settings from an optional TOML secrets file and the environment.

    Args:
        secrets_path: TOML file with a [capture] section
        env_file: .env file loaded into the process environment first
        environ: Mapping used instead of os.environ (tests)

    Returns:
        Frozen Settings instance
    """
    if env_file is not None:
        load_dotenv(env_file)
    env = os.environ if environ is None else environ

    defaults = Settings()
    overrides: Dict[str, Any] = {}

    if secrets_path is not None and Path(secrets_path).exists():
        try:
            section = toml.load(secrets_path).get(TOML_SECTION, {})
        except toml.TomlDecodeError as e:
            raise ConfigurationError(f"Cannot parse {secrets_path}: {e}")
        for f in fields(Settings):
            if f.name in section:
                overrides[f.name] = _coerce(f.name, section[f.name], getattr(defaults, f.name))
        logger.debug(f"Loaded {len(overrides)} settings from {secrets_path}")

    for f in fields(Settings):
        env_key = ENV_PREFIX + f.name.upper()
        if env_key in env:
            overrides[f.name] = _coerce(f.name, env[env_key], getattr(defaults, f.name))

    return replace(defaults, **overrides)
