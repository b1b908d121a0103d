"""
Confluence MCP Server - Errors

Remote failures raised by the Confluence client and surfaced by the services.
"""

from typing import Optional


class ConfluenceAPIError(Exception):
    """A failed call to the Confluence REST API.

    ``status_code`` is the HTTP status when the server answered, or None for
    transport-level failures (connection refused, timeout, ...).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.original = original

    def __str__(self) -> str:
        return self.message

    @property
    def is_bad_request(self) -> bool:
        """True when Confluence rejected the request as malformed (HTTP 400)."""
        return self.status_code == 400


def enrich_bad_request(error: ConfluenceAPIError, operation: str, hint: str) -> None:
    """Rewrite a 400 error message in place with a user-actionable hint."""
    if error.is_bad_request:
        error.message = (
            f"{operation} failed (Status 400 - Bad Request): {error.message}. {hint}"
        )
