"""Error taxonomy shared by the trend services.

Every error carries a stable ``code`` used as the ``error`` field of HTTP
error bodies, and the HTTP status the API layer answers with.
"""

from typing import Any, Dict, List, Optional


class TrendBotError(Exception):
    """Base class for all TrendBot errors."""

    code = "trendbot_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ProviderError(TrendBotError):
    """The LLM provider failed, timed out or answered with unusable output.

    Absorbed by the researcher; never reaches an HTTP client.
    """

    code = "provider_failed"
    status_code = 502


class ValidationError(TrendBotError):
    """Rejected input: empty or malformed ingestion payload, bad filters."""

    code = "validation_failed"
    status_code = 400


class NotFoundError(TrendBotError):
    """No trend exists with the requested id."""

    code = "trend_not_found"
    status_code = 404


class StoreError(TrendBotError):
    """The underlying persistence layer failed."""

    code = "store_unavailable"
    status_code = 503
