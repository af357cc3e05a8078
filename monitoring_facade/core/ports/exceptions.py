"""
Custom exceptions for the monitoring service.
These exceptions represent domain-specific errors and are part of the core business logic.
"""


class MonitoringServiceError(Exception):
    """Base exception for monitoring service errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(message)


class InvalidQueryError(MonitoringServiceError):
    """Raised when query parameters are malformed (bad range, step or expression)."""
    pass


class BackendError(MonitoringServiceError):
    """Raised when the query engine backend fails."""

    def __init__(self, message: str, source_error: Exception = None):
        self.source_error = source_error
        details = str(source_error) if source_error else None
        super().__init__(message, details)


class ExternalServiceError(BackendError):
    """Raised when an external HTTP backend (e.g. Prometheus) is unavailable or returns errors."""

    def __init__(self, service_name: str, status_code: int = None, response_body: str = None):
        self.service_name = service_name
        self.status_code = status_code
        self.response_body = response_body

        message = f"External service '{service_name}' error"
        if status_code:
            message += f" (HTTP {status_code})"

        super().__init__(message)
        self.details = response_body if response_body else None


class StateStoreError(MonitoringServiceError):
    """Raised when a state store list operation fails."""

    def __init__(self, kind: str, source_error: Exception = None):
        self.kind = kind
        self.source_error = source_error
        details = str(source_error) if source_error else None
        super().__init__(f"Failed to list '{kind}' objects", details)


class RewriteError(MonitoringServiceError):
    """Raised when an expression cannot be restricted to a namespace scope."""

    def __init__(self, expression: str, scope: str, reason: str):
        self.expression = expression
        self.scope = scope
        self.reason = reason
        super().__init__(
            f"Cannot scope expression to namespace '{scope}': {reason}",
            expression
        )


class ConfigurationError(MonitoringServiceError):
    """Raised when service configuration is invalid."""
    pass
