"""
Exception hierarchy for levelfit

The rules engines never raise for expected failures (over-spending stat points,
unknown quest or debuff ids, locked titles): those are reported as False/None.
These exceptions cover the edges around the engines: bad input at the API
boundary, unreadable save files and broken configuration.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import json
import logging

from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


class LevelFitError(Exception):
    """
    Base exception for all levelfit errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise LevelFitError(
            message="Failed to save player",
            operation="save_player",
            context={"path": "data/player_data.json"}
        )
    """

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "Something went wrong. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,
            "request_id": self.request_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for display layers"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (caller input)
# ==========================================

class ValidationError(LevelFitError):
    """
    Raised when caller input cannot be interpreted

    Example:
        raise ValidationError(
            message="Unknown stat 'charisma'",
            field="stat",
            value="charisma"
        )
    """

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
# Storage Errors
# ==========================================

class StorageError(LevelFitError):
    """Base class for save-file read/write failures"""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        **kwargs
    ):
        self.key = key
        kwargs.setdefault("user_message", "We couldn't access your saved progress. Please try again.")
        kwargs.setdefault("context", {"key": key})
        super().__init__(message=message, **kwargs)


class RecordCorruptedError(StorageError):
    """A stored record exists but cannot be decoded into its model"""

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            key=key,
            user_message="Your saved progress appears to be damaged.",
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(LevelFitError):
    """System configuration is invalid"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The game is not properly configured.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_storage_exception(
    error: Exception,
    operation: str,
    key: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> LevelFitError:
    """
    Wrap low-level storage exceptions into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        key: Storage key being read or written
        context: Additional context

    Returns:
        Appropriate LevelFitError subclass

    Example:
        try:
            raw = path.read_text()
        except OSError as e:
            raise wrap_storage_exception(e, operation="load_player", key="player_data")
    """
    if isinstance(error, (json.JSONDecodeError, PydanticValidationError, TypeError)):
        return RecordCorruptedError(
            message=f"Stored record '{key}' could not be decoded: {str(error)}",
            key=key,
            operation=operation,
            context=context or {"key": key},
            cause=error
        )
    elif isinstance(error, OSError):
        return StorageError(
            message=f"Storage I/O failed during {operation}: {str(error)}",
            key=key,
            operation=operation,
            context=context or {"key": key},
            cause=error
        )

    # Generic fallback
    else:
        return LevelFitError(
            message=f"{operation} failed: {str(error)}",
            operation=operation,
            context=context,
            cause=error
        )
