"""
Custom exceptions for CRUD_ENGINE.

Every error the engine raises derives from CrudEngineError, which keeps
RuntimeError as its base and carries a context dictionary (model name,
field, action, ...) so callers can render a precise message.
"""

from typing import Any, Dict, List, Optional


class CrudEngineError(RuntimeError):
    """
    Base exception for CRUD Engine errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (model_name,
                 field_name, action, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class NotFoundError(CrudEngineError):
    """
    Raised when a model or a record does not exist (or is not visible
    to the calling principal).

    Attributes:
        model_name: Model that was looked up
        record_id: Record identifier (record lookups only)
    """

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        record_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if model_name:
            context["model_name"] = model_name
        if record_id is not None:
            context["record_id"] = record_id
        super().__init__(message, context=context)
        self.model_name = model_name
        self.record_id = record_id


class ForbiddenError(CrudEngineError):
    """
    Raised when a permission check denies an action or when a principal
    tries to modify a record it does not own.

    Attributes:
        model_name: Model the action targeted
        action: Requested action (create, read, update, delete)
        role: Role of the calling principal
    """

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        action: Optional[str] = None,
        role: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if model_name:
            context["model_name"] = model_name
        if action:
            context["action"] = action
        if role:
            context["role"] = role
        super().__init__(message, context=context)
        self.model_name = model_name
        self.action = action
        self.role = role


class ValidationError(CrudEngineError):
    """
    Raised when a payload value is missing or cannot be coerced to the
    declared field type.

    Attributes:
        field_name: Field that failed validation
        model_name: Model the payload was validated against
        value: Offending raw value (if any)
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        model_name: Optional[str] = None,
        value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if field_name:
            context["field_name"] = field_name
        if model_name:
            context["model_name"] = model_name
        if value is not None:
            context["value"] = value
        super().__init__(message, context=context)
        self.field_name = field_name
        self.model_name = model_name
        self.value = value


class ModelDefinitionError(ValidationError):
    """
    Raised when a model definition is rejected at registration.

    Attributes:
        error_paths: JSON paths of the offending parts of the definition
    """

    def __init__(
        self,
        message: str,
        error_paths: Optional[List[str]] = None,
        model_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if error_paths:
            context["error_paths"] = error_paths
        super().__init__(message, model_name=model_name, context=context)
        self.error_paths = error_paths


class ConflictError(CrudEngineError):
    """
    Raised when a registration would overwrite an existing model and the
    caller asked for creation only.
    """

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if model_name:
            context["model_name"] = model_name
        super().__init__(message, context=context)
        self.model_name = model_name


class StorageError(CrudEngineError):
    """
    Raised by storage clients when the backend fails.

    The message is passed through unsanitized; the HTTP layer is
    responsible for hiding it from clients.

    Attributes:
        table: Table (collection) the operation targeted
        operation: Storage operation name (create, find_many, ...)
    """

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if table:
            context["table"] = table
        if operation:
            context["operation"] = operation
        super().__init__(message, context=context)
        self.table = table
        self.operation = operation


class ConfigurationError(CrudEngineError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value
