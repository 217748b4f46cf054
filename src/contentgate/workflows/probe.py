"""Live reachability probe (TCP connect bounded by a timeout)."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .gate_config import CONNECTIVITY_TIMEOUT, PROBE_HOST, PROBE_PORT
from .gate_utils import run_in_gate_loop

logger = logging.getLogger(__name__)


class ConnectivityProbe:
    """Reports whether a well-known endpoint accepts a TCP connection.

    Timeouts and socket errors read as "not connected" so callers fail closed.
    """

    def __init__(self, host: str = PROBE_HOST, port: int = PROBE_PORT) -> None:
        self.host = host
        self.port = port

    async def _open(self) -> bool:
        writer: Optional[asyncio.StreamWriter] = None
        try:
            _, writer = await asyncio.open_connection(self.host, self.port)
            return True
        finally:
            if writer is not None:
                writer.close()
                try:
                    await writer.wait_closed()
                except OSError:
                    pass

    async def has_connectivity(self, timeout: float = CONNECTIVITY_TIMEOUT) -> bool:
        try:
            return await asyncio.wait_for(self._open(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.debug("probe %s:%s timed out after %.1fs", self.host, self.port, timeout)
            return False
        except OSError as exc:
            logger.debug("probe %s:%s failed: %s", self.host, self.port, exc)
            return False

    def check(self, timeout: float = CONNECTIVITY_TIMEOUT) -> bool:
        return run_in_gate_loop(self.has_connectivity(timeout))


__all__ = ["ConnectivityProbe"]
