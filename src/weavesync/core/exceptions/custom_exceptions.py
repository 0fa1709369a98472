"""
Custom exception hierarchy for WeaveSync error handling.

Every failure a task can report surfaces as one of the exceptions below.
Each carries a human-readable message, a machine-readable error code and a
details dictionary, so the invoking host can log or display the failure
without parsing strings.

Exception Hierarchy:
    WeaveSyncError (base)
    ├── ConfigurationError: Malformed URL, missing or conflicting options,
    │                       unknown task type, undefined template variables
    ├── ConnectionError: Transport-level failures talking to a service
    │   └── WeaviateConnectionError: The Weaviate endpoint could not be reached
    ├── WeaviateRequestError: Weaviate answered with a structured error list
    │   └── QueryError: GraphQL document-level errors in a 200 response
    ├── DeleteCriteriaError: Delete invoked without any selection criteria
    └── StorageError: Internal storage and temp file problems
        └── RowStreamError: Row-stream encoding or decoding failures

Error Context:
    WeaviateRequestError keeps the individual server messages in
    ``details["messages"]`` and the HTTP status in ``details["status_code"]``;
    its message is the messages joined with ``", "``.

Example:
    >>> try:
    ...     task.run(run_context)
    ... except WeaviateRequestError as e:
    ...     logger.error("Weaviate rejected the request",
    ...                  error_code=e.error_code,
    ...                  messages=e.messages)
"""

from typing import Any, Dict, List, Optional


class WeaveSyncError(Exception):
    """
    Base exception class for all WeaveSync errors.

    Attributes:
        message (str): Human-readable error description
        error_code (str): Machine-readable error identifier, defaults to
            the class name
        details (Dict[str, Any]): Additional contextual information

    Example:
        >>> raise WeaveSyncError(
        ...     "Task failed",
        ...     error_code="TASK_FAILED",
        ...     details={"task_id": "create", "class_name": "Movies"}
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(WeaveSyncError):
    """
    Raised when task or application configuration is invalid.

    Always raised before any network call is attempted. Common scenarios:
        - URL without a host or with an unsupported scheme
        - Missing required task options (className, query, fields)
        - Conflicting options (objectId together with filter)
        - Unknown task type in a definition file
        - Template referencing an undefined variable

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid Weaviate URL",
        ...     error_code="CONFIG_INVALID_URL",
        ...     details={"url": "ftp://localhost"}
        ... )
    """

    pass


class ConnectionError(WeaveSyncError):
    """
    Raised when connection to an external service fails.

    Covers DNS failures, refused connections, TLS problems and timeouts.
    There is no retry: a transport failure fails the task invocation.
    """

    pass


class WeaviateConnectionError(ConnectionError):
    """Raised when the Weaviate endpoint cannot be reached"""

    pass


class WeaviateRequestError(WeaveSyncError):
    """
    Raised when Weaviate reports one or more errors for a request.

    The message is the concatenation of every server-reported message,
    joined with ``", "``. Individual messages stay available through
    :attr:`messages`.

    Example:
        >>> raise WeaviateRequestError.from_messages(
        ...     ["class name Movies already exists"],
        ...     status_code=422,
        ... )
    """

    @classmethod
    def from_messages(
        cls,
        messages: List[str],
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        **details: Any,
    ) -> "WeaviateRequestError":
        return cls(
            ", ".join(messages),
            error_code=error_code,
            details={"messages": list(messages), "status_code": status_code, **details},
        )

    @property
    def messages(self) -> List[str]:
        return self.details.get("messages", [self.message])

    @property
    def status_code(self) -> Optional[int]:
        return self.details.get("status_code")


class QueryError(WeaviateRequestError):
    """Raised when a GraphQL response carries document-level errors"""

    pass


class DeleteCriteriaError(WeaveSyncError):
    """
    Raised when a delete is requested without any selection criteria.

    A delete needs an object id, a filter, or an explicit ``deleteAll``
    opt-in. Without one of those nothing is sent to the server.
    """

    pass


class StorageError(WeaveSyncError):
    """
    Raised when internal storage operations fail.

    Common scenarios:
        - URI with an unsupported scheme
        - Storage path escaping the storage root
        - Referenced file missing from storage
    """

    pass


class RowStreamError(StorageError):
    """Raised when a row-stream file cannot be encoded or decoded"""

    pass
