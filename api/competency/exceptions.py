"""
Error taxonomy for the competency catalog.

Every error carries an error_code and an ``extra`` dict naming the field or
condition that failed, so the HTTP layer can explain the failure verbatim.
"""
from typing import Any, Dict, Optional


class CatalogError(Exception):
    """Base error for catalog operations"""

    status_code = 500
    error_code = "CATALOG_ERROR"

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class ValidationError(CatalogError):
    """Malformed or missing input; the caller must fix it"""

    status_code = 400
    error_code = "VALIDATION_FAILED"

    def __init__(self, message: str, field: Optional[str] = None, extra: Optional[Dict[str, Any]] = None):
        details = dict(extra or {})
        if field:
            details["field"] = field
        super().__init__(message, details)
        self.field = field


class ConflictError(CatalogError):
    """Competency code already exists"""

    status_code = 409
    error_code = "COMPETENCY_CODE_CONFLICT"

    def __init__(self, code: str):
        super().__init__(
            f"Competency with code '{code}' already exists",
            {"code": code}
        )


class NotFoundError(CatalogError):
    """Unknown competency id, or unknown replacement target"""

    status_code = 404
    error_code = "COMPETENCY_NOT_FOUND"

    def __init__(self, competency_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"Competency '{competency_id}' not found",
            {"competency_id": str(competency_id)}
        )


class InvalidStateError(CatalogError):
    """Operation is illegal for the competency's current status"""

    status_code = 403
    error_code = "INVALID_COMPETENCY_STATE"

    def __init__(self, message: str, competency_id: Any = None, status: Optional[str] = None):
        extra = {}
        if competency_id is not None:
            extra["competency_id"] = str(competency_id)
        if status is not None:
            extra["status"] = status
        super().__init__(message, extra)


class StoreUnavailableError(CatalogError):
    """Transient infrastructure failure; the whole operation may be retried"""

    status_code = 503
    error_code = "STORE_UNAVAILABLE"

    def __init__(self, operation: str, details: Optional[str] = None):
        super().__init__(
            f"Catalog store unavailable during {operation}",
            {"operation": operation, "details": details}
        )
