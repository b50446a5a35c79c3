"""
Standardized exception hierarchy for the progression engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class SoloistError(Exception):
    """
    Base exception for all progression engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise SoloistError(
            message="Failed to save hunter snapshot",
            user_id="hunter-1",
            operation="save_snapshot",
            context={"quest_id": "q-123"}
        )
    """

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
            "error_context": self.context,  # Avoid conflict with logging's 'context'
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for the presentation layer"""
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

class ValidationError(SoloistError):
    """
    Raised when caller input fails validation

    Examples:
    - Quest task index out of range
    - Unknown daily win category

    Example:
        raise ValidationError(
            message="Quest has no task at index 4",
            field="task_index",
            value=4,
            user_id="hunter-1"
        )
    """

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
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Progression Rejections
# ==========================================

class ProgressionError(SoloistError):
    """
    Base class for rejected progression mutations

    Rejections are expected outcomes (double taps, locked missions), so they
    log at WARNING instead of ERROR.
    """

    log_level = logging.WARNING


class InvalidAmountError(ProgressionError):
    """Raised when an experience award is not strictly positive"""

    def __init__(self, amount: int, **kwargs):
        self.amount = amount
        super().__init__(
            message=f"Experience award must be positive, got {amount}",
            user_message="That reward amount is not valid.",
            context={"amount": amount},
            **kwargs
        )


class AlreadyCompletedError(ProgressionError):
    """Raised when a task, quest or mission is completed a second time"""

    def __init__(
        self,
        record_type: str,
        record_id: str,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=f"{record_type} {record_id} is already completed",
            user_message=f"This {record_type} has already been completed.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


class LockReason(str, Enum):
    """Why an entity cannot be completed right now"""
    EXPIRED = "expired"
    RANK_TOO_LOW = "rank_too_low"
    NOT_RELEASED = "not_released"
    PREREQUISITES_INCOMPLETE = "prerequisites_incomplete"
    QUEST_MISSED = "quest_missed"


_LOCK_MESSAGES = {
    LockReason.EXPIRED: "This mission has expired.",
    LockReason.RANK_TOO_LOW: "Your rank is too low for this mission.",
    LockReason.NOT_RELEASED: "This mission has not been released yet.",
    LockReason.PREREQUISITES_INCOMPLETE: "Complete the required tasks first.",
    LockReason.QUEST_MISSED: "This quest's deadline has passed. Try the recovery quest.",
}


class NotAvailableError(ProgressionError):
    """
    Raised when a mission (or missed quest) cannot be completed

    Carries the specific LockReason so the caller can explain why.
    """

    def __init__(
        self,
        record_id: str,
        reason: LockReason,
        **kwargs
    ):
        self.record_id = record_id
        self.reason = reason
        super().__init__(
            message=f"{record_id} is not available: {reason.value}",
            user_message=_LOCK_MESSAGES[reason],
            context={"record_id": record_id, "reason": reason.value},
            **kwargs
        )


# ==========================================
# Database Errors
# ==========================================

class DatabaseError(SoloistError):
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
        super().__init__(
            message=message,
            user_message="We encountered an issue saving your progress. Please try again.",
            context={"query": query},
            **kwargs
        )


class RecordNotFoundError(DatabaseError):
    """Requested user, quest or mission does not exist"""

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
# Configuration Errors
# ==========================================

class ConfigurationError(SoloistError):
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
) -> SoloistError:
    """
    Wrap psycopg exceptions into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate SoloistError subclass

    Example:
        try:
            await cur.execute(query)
        except psycopg.Error as e:
            raise wrap_external_exception(
                e,
                operation="save_snapshot",
                user_id="hunter-1",
            )
    """
    import psycopg

    if isinstance(error, psycopg.OperationalError):
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
            cause=error
        )

    # Generic fallback
    return SoloistError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
