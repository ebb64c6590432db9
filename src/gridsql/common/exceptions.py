from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from gridsql.types.results import ErrorInfo


class ErrorCode(Enum):
    """Standard error codes for gridsql operations.

    This enum provides categorized error codes that can be used
    to identify error types without creating numerous exception classes.
    Each category has a specific prefix for easy identification.

    Attributes:
        CONFIG_*: Configuration-related errors
        VALIDATION_*: Identifier and input validation errors, raised before
            any network call
        CONNECTION_*: Transport and authentication errors
        EXECUTION_*: Errors reported by the remote server or its payloads
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"

    # Validation errors
    INVALID_IDENTIFIER = "VALIDATION_001"
    INVALID_INPUT = "VALIDATION_002"

    # Connection errors
    AUTH_FAILED = "CONNECTION_001"
    TRANSPORT_FAILED = "CONNECTION_002"
    SERVER_UNREACHABLE = "CONNECTION_003"
    TIMEOUT_ERROR = "CONNECTION_004"
    CANCELLED = "CONNECTION_005"

    # Execution errors
    REMOTE_QUERY_ERROR = "EXECUTION_001"
    INVALID_RESPONSE = "EXECUTION_002"


_VALIDATION_CODES = frozenset({ErrorCode.INVALID_IDENTIFIER, ErrorCode.INVALID_INPUT})

_USER_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.CONFIG_ERROR: "The engine is misconfigured.",
    ErrorCode.INVALID_IDENTIFIER: "Invalid table or column name.",
    ErrorCode.INVALID_INPUT: "Invalid input provided. Please check your data and try again.",
    ErrorCode.AUTH_FAILED: "Authentication failed. Please check your username and password.",
    ErrorCode.TRANSPORT_FAILED: "Connection failed. Please check your network and server settings.",
    ErrorCode.SERVER_UNREACHABLE: "Cannot reach server. Please verify the server address and that it is running.",
    ErrorCode.TIMEOUT_ERROR: "Connection timed out. The server may be busy or unreachable.",
    ErrorCode.CANCELLED: "Operation cancelled.",
    ErrorCode.REMOTE_QUERY_ERROR: "The server rejected the query.",
    ErrorCode.INVALID_RESPONSE: "Received unexpected response from server. Please try again.",
}


class GridSQLError(Exception):
    """Base exception for all gridsql errors.

    This exception class uses error codes for categorization instead of
    creating numerous specific exception classes.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
        is_retryable: Whether the error is transient and can be retried
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.REMOTE_QUERY_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        is_retryable: bool = False
    ):
        """Initialize gridsql error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
            cause: Optional underlying exception
            is_retryable: Whether error is transient
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.is_retryable = is_retryable

        # Lazy import to avoid circular dependency
        from gridsql.logging import get_logger
        logger = get_logger(__name__)
        log = logger.info if error_code is ErrorCode.CANCELLED else logger.error
        log(
            message,
            extra={
                "error_code": error_code.value,
                "error_details": self.details,
                "is_retryable": is_retryable,
            },
            exc_info=cause is not None
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    @property
    def is_recoverable(self) -> bool:
        """Whether the caller can recover by retrying or correcting input.

        Validation failures are caller bugs or stale UI state: repeating
        the same request cannot succeed.
        """
        return self.error_code not in _VALIDATION_CODES

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
            "is_retryable": self.is_retryable
        }

    def to_error_info(self, context: str = "") -> "ErrorInfo":
        """Convert to the structured error returned by public operations.

        Args:
            context: Name of the operation that failed

        Returns:
            ErrorInfo carrying code, message and recoverability
        """
        from gridsql.types.results import ErrorInfo

        return ErrorInfo(
            code=self.error_code,
            message=self.message,
            recoverable=self.is_recoverable,
            context=context,
            details=self.details,
        )

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        message: Optional[str] = None,
        **kwargs
    ) -> "GridSQLError":
        """Create exception from error code.

        Args:
            error_code: Error code
            message: Error message; defaults to the user-facing text for the code
            **kwargs: Additional arguments for GridSQLError

        Returns:
            GridSQLError instance
        """
        if error_code in [ErrorCode.TIMEOUT_ERROR, ErrorCode.SERVER_UNREACHABLE]:
            kwargs.setdefault('is_retryable', True)

        return cls(message=message or user_message(error_code), error_code=error_code, **kwargs)


def user_message(error_code: ErrorCode) -> str:
    """Get the default user-facing message for an error code."""
    return _USER_MESSAGES.get(error_code, "An unexpected error occurred.")


def invalid_identifier_error(
    raw: Any,
    role: str,
    reason: str = "contains invalid characters",
    **kwargs
) -> GridSQLError:
    """Create an invalid identifier error.

    Args:
        raw: The rejected identifier
        role: What the identifier was used as ("table name", "column name", ...)
        reason: Why it was rejected

    Returns:
        GridSQLError with INVALID_IDENTIFIER code
    """
    details = kwargs.pop('details', {})
    details["role"] = role
    details["value"] = str(raw)

    return GridSQLError(
        message=f"Invalid {role}: \"{raw}\" {reason}",
        error_code=ErrorCode.INVALID_IDENTIFIER,
        details=details,
        **kwargs
    )


def invalid_input_error(
    message: str,
    field: Optional[str] = None,
    **kwargs
) -> GridSQLError:
    """Create an invalid input error.

    Args:
        message: Error message
        field: Field that failed validation

    Returns:
        GridSQLError with INVALID_INPUT code
    """
    details = kwargs.pop('details', {})
    if field:
        details["field"] = field

    return GridSQLError(
        message=message,
        error_code=ErrorCode.INVALID_INPUT,
        details=details,
        **kwargs
    )


def auth_failed_error(
    message: Optional[str] = None,
    status_code: Optional[int] = None,
    **kwargs
) -> GridSQLError:
    """Create an authentication failure error (HTTP 401/403 or auth text in the body)."""
    details = kwargs.pop('details', {})
    if status_code is not None:
        details["status_code"] = status_code

    return GridSQLError.from_error_code(
        ErrorCode.AUTH_FAILED,
        message,
        details=details,
        **kwargs
    )


def transport_failed_error(
    status_code: int,
    **kwargs
) -> GridSQLError:
    """Create a transport failure error for a non-2xx HTTP status.

    Args:
        status_code: HTTP status returned by the server

    Returns:
        GridSQLError with TRANSPORT_FAILED code
    """
    details = kwargs.pop('details', {})
    details["status_code"] = status_code

    return GridSQLError(
        message=f"Server returned status {status_code}",
        error_code=ErrorCode.TRANSPORT_FAILED,
        details=details,
        **kwargs
    )


def server_unreachable_error(
    host: Optional[str] = None,
    **kwargs
) -> GridSQLError:
    """Create a server unreachable error for network-level faults."""
    details = kwargs.pop('details', {})
    if host:
        details["host"] = host

    return GridSQLError.from_error_code(
        ErrorCode.SERVER_UNREACHABLE,
        details=details,
        **kwargs
    )


def timeout_error(
    timeout_seconds: Optional[float] = None,
    **kwargs
) -> GridSQLError:
    """Create a timeout error for a request that exceeded its time limit."""
    details = kwargs.pop('details', {})
    if timeout_seconds is not None:
        details["timeout_seconds"] = timeout_seconds

    return GridSQLError.from_error_code(
        ErrorCode.TIMEOUT_ERROR,
        details=details,
        **kwargs
    )


def cancelled_error(**kwargs) -> GridSQLError:
    """Create a cancellation error for caller-initiated aborts."""
    return GridSQLError.from_error_code(ErrorCode.CANCELLED, **kwargs)


def remote_query_error(
    message: str,
    query: Optional[str] = None,
    **kwargs
) -> GridSQLError:
    """Create an error for a SQL-level failure reported by the server.

    Args:
        message: Error text reported by the server, passed through verbatim
        query: Query that failed (if applicable)

    Returns:
        GridSQLError with REMOTE_QUERY_ERROR code
    """
    details = kwargs.pop('details', {})
    if query:
        # Truncate long queries to prevent log bloat
        details["query"] = query[:500] + "..." if len(query) > 500 else query

    return GridSQLError(
        message=message or user_message(ErrorCode.REMOTE_QUERY_ERROR),
        error_code=ErrorCode.REMOTE_QUERY_ERROR,
        details=details,
        **kwargs
    )


def invalid_response_error(
    message: Optional[str] = None,
    **kwargs
) -> GridSQLError:
    """Create an error for a response body that could not be interpreted."""
    return GridSQLError.from_error_code(ErrorCode.INVALID_RESPONSE, message, **kwargs)
