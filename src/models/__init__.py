from models.errors import (
    ApiError,
    NetworkError,
    NotFoundOrConflictError,
    UnknownServerError,
    ValidationError,
)
from models.schemas import (
    ApiEnvelope,
    Brand,
    BrandCreate,
    BrandStatus,
    BrandUpdate,
    CreatedBrandData,
    Owner,
)

__all__ = [
    "ApiEnvelope",
    "ApiError",
    "Brand",
    "BrandCreate",
    "BrandStatus",
    "BrandUpdate",
    "CreatedBrandData",
    "NetworkError",
    "NotFoundOrConflictError",
    "Owner",
    "UnknownServerError",
    "ValidationError",
]
