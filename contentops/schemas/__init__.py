"""
Pydantic schemas for API request/response validation.
"""

from contentops.schemas.assignment import (
    AssignedAdmin,
    AssignedFounder,
    AssignmentReplace,
    AssignmentResponse,
)
from contentops.schemas.auth import (
    AdminRegister,
    FounderRegister,
    TokenResponse,
    UserLogin,
    UserResponse,
)
from contentops.schemas.common import (
    ErrorResponse,
    PaginatedResponse,
    SuccessResponse,
)
from contentops.schemas.dashboard import DashboardEnvelope
from contentops.schemas.metrics import MetricsResponse, MetricsUpload
from contentops.schemas.post import (
    ImageUpload,
    ImageUploadResponse,
    PostCreate,
    PostResponse,
    PostStatusUpdate,
    PostUpdate,
)

__all__ = [
    # Auth
    "UserLogin",
    "FounderRegister",
    "AdminRegister",
    "UserResponse",
    "TokenResponse",
    # Assignments
    "AssignmentReplace",
    "AssignmentResponse",
    "AssignedAdmin",
    "AssignedFounder",
    # Metrics
    "MetricsUpload",
    "MetricsResponse",
    # Posts
    "PostCreate",
    "PostUpdate",
    "PostStatusUpdate",
    "PostResponse",
    "ImageUpload",
    "ImageUploadResponse",
    # Dashboards
    "DashboardEnvelope",
    # Common
    "PaginatedResponse",
    "ErrorResponse",
    "SuccessResponse",
]
