"""Error taxonomy surfaced by the recommendation services."""
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for user-facing error messages."""
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    UPSTREAM_FAILED = "UPSTREAM_FAILED"
    AUTH_FAILED = "AUTH_FAILED"
    PERMISSION_DENIED = "PERMISSION_DENIED"


class RecommendationServiceError(Exception):
    """Base error carrying a specific error code"""

    error_code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self):
        # Format used for logging
        return f"[{self.error_code.value}] {self.message}"


class NotFoundError(RecommendationServiceError):
    """Folder, document, file or version does not exist"""
    error_code = ErrorCode.NOT_FOUND


class ValidationError(RecommendationServiceError):
    """Malformed input: empty names, overlapping decision ids, bad uploads"""
    error_code = ErrorCode.VALIDATION_FAILED


class ConflictError(RecommendationServiceError):
    """Resource already exists, or a version changed since the caller read it"""
    error_code = ErrorCode.CONFLICT


class UpstreamError(RecommendationServiceError):
    """AI engine or storage backend failure"""
    error_code = ErrorCode.UPSTREAM_FAILED


class AuthError(RecommendationServiceError):
    """Missing or invalid credential"""
    error_code = ErrorCode.AUTH_FAILED


class PermissionDeniedError(AuthError):
    """Authenticated role lacks the requested capability"""
    error_code = ErrorCode.PERMISSION_DENIED
