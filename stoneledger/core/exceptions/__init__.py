from stoneledger.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    InvalidFilterError,
    MissingBoundsError,
    InvertedRangeError,
    OrganizationNotFoundError,
    RenderTimeoutError,
    RenderEngineError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "InvalidFilterError",
    "MissingBoundsError",
    "InvertedRangeError",
    "OrganizationNotFoundError",
    "RenderTimeoutError",
    "RenderEngineError",
]
