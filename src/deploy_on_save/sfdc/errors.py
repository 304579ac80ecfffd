from typing import Any

import httpx


class SalesforceError(Exception):
    """A Salesforce REST call answered with an error status."""

    def __init__(self, message: str, error_code: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code

    @classmethod
    def from_response(cls, response: httpx.Response) -> "SalesforceError":
        try:
            body: Any = response.json()
        except ValueError:
            body = None

        errors = body if isinstance(body, list) else [body] if isinstance(body, dict) else []
        messages = [str(e.get("message")) for e in errors if isinstance(e, dict) and e.get("message")]
        codes = [str(e.get("errorCode")) for e in errors if isinstance(e, dict) and e.get("errorCode")]
        message = "; ".join(messages) or response.text or f"HTTP {response.status_code}"
        return cls(message, error_code=codes[0] if codes else None, status_code=response.status_code)


class ToolingCompileError(Exception):
    """A tooling container compile could not be submitted."""
