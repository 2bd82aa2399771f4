"""
Permission Core - relationship-scoped authorization.
"""

from contentops.kernel.permissions.permission_service import (
    AuthorizationService,
    Resource,
    ResourceClass,
    founder_exists,
)

__all__ = [
    "AuthorizationService",
    "Resource",
    "ResourceClass",
    "founder_exists",
]
