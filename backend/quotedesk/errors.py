"""
Error types raised across quotedesk.

Per-symbol outcomes of a batch (upstream error, timeout, invalid payload) are
carried as data in the envelope. Only the errors below cross the HTTP
boundary, mapped to a status code by the application's exception handler.
"""

from __future__ import annotations

from fastapi import status

_BENIGN_MARKERS = ("Not Found", "Invalid")


class QuoteDeskError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class UpstreamError(QuoteDeskError):
    """The market-data provider answered with an error or unusable data."""

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message or "Failed to fetch", details)
        self.upstream_status = upstream_status

    @property
    def is_benign(self) -> bool:
        # Unknown or malformed symbols are expected noise, not incidents.
        return any(marker in self.message for marker in _BENIGN_MARKERS)


class InvalidArgument(QuoteDeskError):
    status_code = status.HTTP_400_BAD_REQUEST


class IntegrationUnavailable(QuoteDeskError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
