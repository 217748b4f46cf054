"""Failure taxonomy for gate checks.

Every error carries the diagnostic text that ends up in
``GateDecision.reason``. They are raised by resolver and engine helpers and
recovered locally; nothing here escapes ``GateEngine.evaluate``.
"""

from __future__ import annotations

from typing import Optional


class GateError(Exception):
    """Base class; ``str(exc)`` is the diagnostic reason."""

    reason = "Unknown error"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(self._format())

    def _format(self) -> str:
        return self.reason


class InvalidUrl(GateError):
    reason = "Invalid URL"


class NoConnectivity(GateError):
    reason = "No internet connection"


class DateNotReached(GateError):
    reason = "Target date not reached"


class UnsupportedDevice(GateError):
    reason = "Device not supported"

    def _format(self) -> str:
        if self.detail:
            return f"{self.reason} ({self.detail})"
        return self.reason


class ServerError(GateError):
    reason = "Server error"

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(str(status))

    def _format(self) -> str:
        return f"{self.reason}: {self.status}"


class NetworkError(GateError):
    reason = "Network error"

    def _format(self) -> str:
        return f"{self.reason}: {self.detail}" if self.detail else self.reason


class InvalidResponse(GateError):
    reason = "Invalid response"


class Timeout(GateError):
    reason = "Timeout"


__all__ = [
    "GateError",
    "InvalidUrl",
    "NoConnectivity",
    "DateNotReached",
    "UnsupportedDevice",
    "ServerError",
    "NetworkError",
    "InvalidResponse",
    "Timeout",
]
