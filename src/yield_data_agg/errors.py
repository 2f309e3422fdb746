"""Typed errors and their mapping to HTTP responses."""
import asyncio
from dataclasses import dataclass

import httpx
from fastapi import HTTPException


class YieldAggError(Exception):
    """Base class for errors raised by the yield aggregation service."""


class AdapterUnavailable(YieldAggError):
    """A single yield source failed (network, auth, timeout or bad payload)."""

    def __init__(self, adapter: str, reason: str) -> None:
        super().__init__(f"{adapter} unavailable: {reason}")
        self.adapter = adapter
        self.reason = reason


class PersistenceUnavailable(YieldAggError):
    """The database is not configured or cannot be reached."""


class InvalidRequest(YieldAggError):
    """Malformed or missing request parameters."""


class Unauthorized(YieldAggError):
    """Missing or invalid caller identity or shared secret."""


@dataclass(frozen=True)
class ErrorMapper:
    """Maps service exceptions to HTTP (status_code, detail).

    Each router holds one, labelled with the resource it serves, so messages
    read "Alert 12 not found" rather than a generic "Resource not found".
    """

    resource_name: str = "Resource"
    api_name: str = "API"

    def to_http(self, exc: Exception, key: object | None = None) -> tuple[int, str]:
        """Map an exception to (status_code, detail)."""
        if isinstance(exc, InvalidRequest):
            return (400, str(exc) or "Invalid request")
        if isinstance(exc, Unauthorized):
            return (401, str(exc) or "Unauthorized")
        if isinstance(exc, LookupError):
            if key is None:
                return (404, f"{self.resource_name} not found")
            return (404, f"{self.resource_name} {key} not found")
        if isinstance(exc, PersistenceUnavailable):
            return (503, "Database unavailable")
        if isinstance(exc, AdapterUnavailable):
            return (502, f"{self.api_name} error")
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            return (502 if status >= 500 else status, f"{self.api_name} error")
        if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
            return (504, f"Request to {self.api_name} timed out")
        return (500, "Internal server error")

    def raise_http(self, exc: Exception, key: object | None = None) -> None:
        """Map exception to HTTP and raise HTTPException. Never returns."""
        status_code, detail = self.to_http(exc, key=key)
        raise HTTPException(status_code=status_code, detail=detail) from exc
