"""Exception hierarchy for the intent-detection client."""


class IntentClientError(Exception):
    """Base exception for intent client errors."""
    pass


class ConfigurationError(IntentClientError):
    """Raised when configuration cannot be loaded from the environment."""
    pass


# ============================================================================
# Connection errors (raised by connect)
# ============================================================================

class ClientConnectionError(IntentClientError):
    """Raised when a client cannot be built from its configuration."""
    pass


class InvalidEndpointError(ClientConnectionError):
    """Raised when the endpoint is not a well-formed address."""

    def __init__(self, endpoint: str, reason: str):
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"Invalid endpoint {endpoint!r}: {reason}")


class MissingCredentialsError(ClientConnectionError):
    """Raised when a secure channel is requested without credential material."""
    pass


class InsecureChannelError(ClientConnectionError):
    """Raised when an insecure channel is requested in production."""
    pass


# ============================================================================
# Call errors (raised by detect_intent)
# ============================================================================

class CallError(IntentClientError):
    """Base exception for a failed detect-intent call."""
    pass


class InvalidRequestError(CallError):
    """Raised when a request fails validation. No remote call was made."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class TransportError(CallError):
    """Raised on transport failure: unreachable host, TLS failure, timeout."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class RemoteError(CallError):
    """Raised when the service answers with an error status."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class DecodeError(CallError):
    """Raised when a reply does not match the expected schema."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)
