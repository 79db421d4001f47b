# core/errors.py

from fastapi import HTTPException


# ============================================================
# Error taxonomy
# ============================================================

class ApiError(HTTPException):
    """
    Base API error. Raised from routers/helpers and rendered by the
    exception handlers in main.py as:

        {"success": false, "error": {"message": ..., "code": ...}}
    """

    def __init__(self, status_code: int, message: str, headers: dict = None):
        super().__init__(status_code=status_code, detail=message, headers=headers)

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(ApiError):
    def __init__(self, message: str = "Invalid input data"):
        super().__init__(400, message)


class AuthenticationError(ApiError):
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(401, message, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(ApiError):
    def __init__(self, message: str = "Not authorized"):
        super().__init__(403, message)


class NotFoundError(ApiError):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(404, message)


class UpstreamError(ApiError):
    """Database or payment-gateway failure."""

    def __init__(self, message: str = "Upstream service error"):
        super().__init__(502, message)


def error_body(message: str, code: int) -> dict:
    return {"success": False, "error": {"message": message, "code": code}}


# ============================================================
# Supabase error helpers
# ============================================================

def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors (APIError carries .message)
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    if hasattr(error, "message"):
        try:
            return str(error.message)
        except Exception:
            pass

    if hasattr(error, "args") and error.args:
        try:
            return str(error.args[0])
        except Exception:
            pass

    try:
        return str(error)
    except Exception:
        return "Unknown Supabase error"


def handle_supabase_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> ApiError:
    """
    Map a Supabase exception to an ApiError.
    Returns (doesn't raise) so the caller decides: `raise handle_supabase_error(e, "...")`.

    Args:
        error: The exception that occurred
        operation: Description of what failed (e.g., "Failed to create supplier")
        status_code: HTTP status used when nothing more specific matches
    """
    from core.logging_config import logger

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return ValidationError(f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return ValidationError(f"{operation}: Invalid reference")
    elif "not found" in error_lower or "does not exist" in error_lower or "pgrst116" in error_lower:
        return NotFoundError(f"{operation}: Resource not found")
    else:
        return ApiError(status_code, f"{operation} failed")
