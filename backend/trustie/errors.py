"""
Error taxonomy for the verification service.

HOW EACH ERROR IS HANDLED:
- ValidationError    → 400, message returned verbatim to the caller
- ConfigurationError → 500, backend credentials are missing
- BackendError       → absorbed by the service that made the call;
                       the claim/evidence degrades to its safe default
- ParseError         → absorbed; fallback heuristics, then safe default

Anything else that escapes a route becomes a generic 500.
"""


class TrustieError(Exception):
    """Base class for all service errors."""


class ValidationError(TrustieError):
    """Malformed or out-of-range request input."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class ConfigurationError(TrustieError):
    """The service is missing configuration it cannot run without."""


class BackendError(TrustieError):
    """A call to the reasoning/retrieval backend failed or timed out."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Backend call failed: {reason}")


class ParseError(TrustieError):
    """The backend reply did not contain the expected JSON payload."""
