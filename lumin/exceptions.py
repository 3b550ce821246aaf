"""
Standardized exception hierarchy for LUMIN
Provides rich context, consistent logging, HTTP status mapping and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class LuminError(Exception):
    """
    Base exception for all LUMIN errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - HTTP status code used by the API envelope
    - Automatic logging

    Example:
        raise LuminError(
            message="Failed to save journal entry",
            user_id="5f0c...",
            operation="create_entry",
            context={"mood": "happy"}
        )
    """

    status_code: int = 500
    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (User Input)
# ==========================================

class ValidationError(LuminError):
    """
    Raised when user input fails validation

    Examples:
    - Journal notes shorter than 10 characters
    - Unknown mood
    - Goal target value that is not positive

    Example:
        raise ValidationError(
            message="Notes must be at least 10 characters",
            field="notes",
            value="too short"
        )
    """

    status_code = 400
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        kwargs.setdefault("user_message", message)
        super().__init__(
            message=message,
            context={"field": field, "value": value},
            **kwargs
        )


class ConflictError(LuminError):
    """
    Raised when an action conflicts with the current state

    Examples:
    - A second journal entry on the same calendar day
    - Completing an already completed challenge or milestone
    """

    status_code = 409
    log_level = logging.WARNING

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("user_message", message)
        super().__init__(message=message, **kwargs)


# ==========================================
# Database Errors
# ==========================================

class DatabaseError(LuminError):
    """
    Base class for database-related errors
    """
    pass


class ConnectionError(DatabaseError):
    """Database connection failed"""

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(
            message=message,
            user_message="We're having trouble connecting to the database. Please try again in a moment.",
            **kwargs
        )


class QueryError(DatabaseError):
    """Database query execution failed"""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        **kwargs
    ):
        self.query = query
        kwargs.setdefault("context", {"query": query})
        super().__init__(
            message=message,
            user_message="We encountered an issue saving your data. Please try again.",
            **kwargs
        )


class DuplicateRecordError(DatabaseError):
    """A unique constraint was violated"""

    status_code = 400
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        constraint: Optional[str] = None,
        **kwargs
    ):
        self.constraint = constraint
        error_context = {"constraint": constraint}
        error_context.update(kwargs.pop("context", None) or {})
        kwargs.setdefault("user_message", "A record with this value already exists.")
        super().__init__(
            message=message,
            context=error_context,
            **kwargs
        )


class RecordNotFoundError(DatabaseError):
    """Requested database record does not exist"""

    status_code = 404
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# External API Errors
# ==========================================

class ExternalAPIError(LuminError):
    """
    Base class for external API failures
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        upstream_status: Optional[int] = None,
        **kwargs
    ):
        self.service = service
        self.upstream_status = upstream_status
        kwargs.setdefault(
            "user_message",
            f"We're having trouble connecting to {service or 'an external service'}. Please try again later."
        )
        error_context = {"service": service, "status_code": upstream_status}
        error_context.update(kwargs.pop("context", None) or {})
        super().__init__(
            message=message,
            context=error_context,
            **kwargs
        )


class AIServiceError(ExternalAPIError):
    """Generative model call failed or returned unusable content"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            service="AI coach",
            **kwargs
        )


# ==========================================
# Authentication & Authorization
# ==========================================

class AuthenticationError(LuminError):
    """Authentication failed"""

    status_code = 401
    log_level = logging.WARNING

    def __init__(
        self,
        message: str = "Authentication failed",
        **kwargs
    ):
        kwargs.setdefault("user_message", "Authentication failed. Please check your credentials.")
        super().__init__(
            message=message,
            **kwargs
        )


class SessionExpiredError(AuthenticationError):
    """Stored tokens could not be refreshed; the user must log in again"""

    def __init__(self, message: str = "Session expired", **kwargs):
        super().__init__(
            message=message,
            user_message="Your session has expired. Please log in again.",
            **kwargs
        )


class AuthorizationError(LuminError):
    """User lacks permission for requested operation"""

    status_code = 403
    log_level = logging.WARNING

    def __init__(
        self,
        message: str = "Insufficient permissions",
        resource: Optional[str] = None,
        **kwargs
    ):
        self.resource = resource
        super().__init__(
            message=message,
            user_message=f"You don't have permission to access {resource or 'this resource'}.",
            context={"resource": resource},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(LuminError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> LuminError:
    """
    Wrap external exceptions (psycopg, httpx, etc.) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate LuminError subclass

    Example:
        try:
            await cur.execute(query)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="create_entry", user_id=user_id)
    """
    # Import here to avoid circular dependencies
    import psycopg
    import httpx

    # Database errors
    if isinstance(error, psycopg.errors.UniqueViolation):
        constraint = getattr(error.diag, "constraint_name", None)
        return DuplicateRecordError(
            message=f"Duplicate value violates {constraint or 'a unique constraint'}",
            constraint=constraint,
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, psycopg.errors.InvalidTextRepresentation):
        # Malformed identifiers are reported as missing records
        return RecordNotFoundError(
            message=f"Malformed identifier: {str(error)}",
            user_id=user_id,
            operation=operation,
            cause=error
        )
    elif isinstance(error, psycopg.OperationalError):
        return ConnectionError(
            message=f"Database connection failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, psycopg.Error):
        return QueryError(
            message=f"Database query failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    # HTTP errors
    elif isinstance(error, httpx.TimeoutException):
        return ExternalAPIError(
            message=f"API request timed out: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, httpx.HTTPStatusError):
        return ExternalAPIError(
            message=f"API returned error: {error.response.status_code}",
            upstream_status=error.response.status_code,
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    # Generic fallback
    else:
        return LuminError(
            message=f"{operation} failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
