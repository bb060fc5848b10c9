# =============================================================================
# capture_core/__init__.py
# Offline-first Dynamic Form Capture
# =============================================================================

__version__ = "1.0.0"

from capture_core.config import Settings, load_settings
from capture_core.runtime import CaptureRuntime

__all__ = ["__version__", "Settings", "load_settings", "CaptureRuntime"]
