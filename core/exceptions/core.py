"""SectionHound Core Exceptions - Core exception classes for error handling.

This module contains the exception hierarchy for the SectionHound system. Errors
are never swallowed by the core: they surface to the caller of ``consume`` or
``search`` carrying enough context to decide between retrying and giving up.
"""

from typing import Optional, Any, Dict


class SectionHoundError(Exception):
    """Base exception for all SectionHound-specific errors.

    This is the root exception class that all other SectionHound exceptions
    inherit from. It provides context tracking and an optional cause.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize SectionHound error.

        Args:
            message: Human-readable error description
            context: Optional dictionary with error context (e.g., file ids, chunk ids)
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        """Return formatted error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message

    def add_context(self, key: str, value: Any) -> "SectionHoundError":
        """Add context information to the error."""
        self.context[key] = value
        return self


class ValidationError(SectionHoundError):
    """Raised when data validation fails.

    Used for invalid model fields and for rejecting bad input (such as a
    missing file source or an empty file id) before any I/O happens.
    """

    def __init__(
        self,
        field: str,
        value: Any,
        reason: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize validation error.

        Args:
            field: Name of the field that failed validation
            value: The invalid value
            reason: Description of why validation failed
            context: Optional additional context
        """
        message = f"Validation failed for field '{field}': {reason}"
        super().__init__(message, context)
        self.field = field
        self.value = value
        self.reason = reason


class ModelError(SectionHoundError):
    """Raised when domain model operations fail, e.g. a section with no chunks."""

    def __init__(
        self,
        model_type: str,
        operation: str,
        reason: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize model error.

        Args:
            model_type: Type of model that caused the error (e.g., "KnowledgeFileSection")
            operation: Operation that failed (e.g., "create", "update")
            reason: Description of what went wrong
            context: Optional additional context
        """
        message = f"{model_type} {operation} failed: {reason}"
        super().__init__(message, context)
        self.model_type = model_type
        self.operation = operation
        self.reason = reason


class EmbeddingError(SectionHoundError):
    """Raised when embedding operations fail."""

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        operation: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize embedding error.

        Args:
            provider: Embedding provider name (e.g., "openai")
            model: Model name (e.g., "text-embedding-3-small")
            operation: Operation that failed (e.g., "generate", "store")
            reason: Description of what went wrong
            context: Optional additional context
        """
        parts = []
        if provider:
            parts.append(f"provider={provider}")
        if model:
            parts.append(f"model={model}")
        if operation:
            parts.append(f"operation={operation}")

        prefix = f"Embedding error ({', '.join(parts)})" if parts else "Embedding error"
        message = f"{prefix}: {reason}" if reason else prefix

        super().__init__(message, context)
        self.provider = provider
        self.model = model
        self.operation = operation
        self.reason = reason


class MissingEmbeddingError(EmbeddingError):
    """Raised when a chunk reaches persistence without an embedding.

    This is a broken upstream contract and is never retried.
    """

    def __init__(self, chunk_id: Any, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            operation="index",
            reason=f"Chunk {chunk_id} has no embedding",
            context=context,
        )
        self.chunk_id = chunk_id


class IndexingError(SectionHoundError):
    """Raised when the indexing pipeline cannot complete for a file."""

    def __init__(
        self,
        file_id: Optional[Any] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize indexing error.

        Args:
            file_id: Identifier of the file being indexed
            reason: Description of what went wrong
            context: Optional additional context
            cause: Optional underlying exception
        """
        prefix = f"Indexing error (file={file_id})" if file_id else "Indexing error"
        message = f"{prefix}: {reason}" if reason else prefix
        super().__init__(message, context, cause)
        self.file_id = file_id
        self.reason = reason


class IndexingInvariantError(IndexingError):
    """Raised when a record the pipeline created can no longer be found."""


class DatabaseError(SectionHoundError):
    """Raised when database operations fail.

    Store adapters wrap driver errors in this exception and keep the driver
    error as ``cause``.
    """

    def __init__(
        self,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize database error.

        Args:
            operation: Database operation that failed (e.g., "insert", "query", "update")
            table: Database table involved in the operation
            reason: Description of what went wrong
            context: Optional additional context
            cause: Optional underlying driver exception
        """
        parts = []
        if operation:
            parts.append(f"operation={operation}")
        if table:
            parts.append(f"table={table}")

        prefix = f"Database error ({', '.join(parts)})" if parts else "Database error"
        message = f"{prefix}: {reason}" if reason else prefix

        super().__init__(message, context, cause)
        self.operation = operation
        self.table = table
        self.reason = reason


class ConfigurationError(SectionHoundError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize configuration error.

        Args:
            config_key: Configuration key that caused the error
            config_value: Invalid configuration value
            reason: Description of what went wrong
            context: Optional additional context
        """
        if config_key:
            message = f"Configuration error for '{config_key}': {reason}"
        else:
            message = f"Configuration error: {reason}" if reason else "Configuration error"

        super().__init__(message, context)
        self.config_key = config_key
        self.config_value = config_value
        self.reason = reason


class ProviderError(SectionHoundError):
    """Raised when external provider operations fail (OpenAI API, tokenizer backends)."""

    def __init__(
        self,
        provider: Optional[str] = None,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize provider error.

        Args:
            provider: Provider name (e.g., "openai", "tiktoken")
            service: Service or endpoint that failed
            status_code: HTTP status code if applicable
            reason: Description of what went wrong
            context: Optional additional context
        """
        parts = []
        if provider:
            parts.append(f"provider={provider}")
        if service:
            parts.append(f"service={service}")
        if status_code:
            parts.append(f"status={status_code}")

        prefix = f"Provider error ({', '.join(parts)})" if parts else "Provider error"
        message = f"{prefix}: {reason}" if reason else prefix

        super().__init__(message, context)
        self.provider = provider
        self.service = service
        self.status_code = status_code
        self.reason = reason
