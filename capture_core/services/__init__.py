# =============================================================================
# capture_core/services/__init__.py
# Service Layer for the capture engine
# Separates business logic from UI presentation
# =============================================================================
"""
Service Layer

Usage Example:
-------------
    from capture_core.services import CaptureService, AdminService

    capture = CaptureService(resolver, store)
    capture.load_schema()
    result = capture.submit(form_values)
    if not result.success:
        print(result.error)

    admin = AdminService(client)
    if admin.login(email, password):
        admin.save_schema(builder)
"""

from .base_service import BaseService, ServiceResult
from .capture_service import CaptureService
from .admin_service import AdminService
from .members import member_stats, search_members

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Capture side
    "CaptureService",
    # Admin side
    "AdminService",
    # Member helpers
    "member_stats",
    "search_members",
]
