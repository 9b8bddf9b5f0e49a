"""Core custom exceptions for the gateway.

Every error that reaches the HTTP layer carries the status code and the
message placed in the ``{"error": ...}`` envelope.
"""

DEFAULT_PROVIDER_ERROR_MESSAGE = "Error generando propuesta"


class GatewayError(Exception):
    """Base exception for request-terminating errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthorizationError(GatewayError):
    """Missing or incorrect shared secret."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ProposalValidationError(GatewayError):
    """A mandatory proposal field is missing or falsy."""

    status_code = 400

    def __init__(self, message: str = "Faltan campos obligatorios.", missing_fields: list[str] | None = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class PayloadTooLargeError(GatewayError):
    status_code = 413

    def __init__(self, message: str = "Payload too large"):
        super().__init__(message)


class ProviderError(GatewayError):
    """Failure opening or consuming the generation stream."""

    status_code = 500


class GenerationTimeoutError(GatewayError):
    status_code = 504

    def __init__(self, message: str = "Tiempo de espera agotado generando propuesta"):
        super().__init__(message)


class ClientDisconnectedError(GatewayError):
    """The caller closed the connection before the document was complete."""

    status_code = 499

    def __init__(self, message: str = "Client closed request"):
        super().__init__(message)


class ConfigurationError(Exception):
    """Exception for configuration-related errors (e.g., missing secrets)."""
