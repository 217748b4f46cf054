"""HTTP resolver: GET with redirects, capture the final URL, classify the status."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import aiohttp

from ..core.keys import K_PARAM_DEVICE_ID
from .gate_config import (
    DEFAULT_TIMEOUT,
    MAX_REDIRECTS,
    SUCCESS_STATUS_MAX,
    SUCCESS_STATUS_MIN,
    USER_AGENT,
)
from .gate_errors import (
    GateError,
    InvalidResponse,
    InvalidUrl,
    NetworkError,
    ServerError,
    Timeout,
)
from .gate_utils import require_http_url, run_in_gate_loop, with_query_param

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveResult:
    """Outcome of one resolve; ``final_url`` is empty on failure."""

    success: bool
    final_url: str
    reason: str
    status: Optional[int] = None

    @classmethod
    def ok(cls, final_url: str, status: int) -> "ResolveResult":
        return cls(True, final_url, "Success", status)

    @classmethod
    def failed(cls, error: GateError, status: Optional[int] = None) -> "ResolveResult":
        return cls(False, "", str(error), status)


class HttpResolver:
    """Resolves candidate URLs to their final destination."""

    def __init__(
        self,
        *,
        user_agent: str = USER_AGENT,
        max_redirects: int = MAX_REDIRECTS,
        status_min: int = SUCCESS_STATUS_MIN,
        status_max: int = SUCCESS_STATUS_MAX,
    ) -> None:
        self.user_agent = user_agent
        self.max_redirects = max_redirects
        self.status_min = status_min
        self.status_max = status_max

    def is_success_status(self, status: int) -> bool:
        return self.status_min <= status <= self.status_max

    async def _get(self, url: str, timeout: float) -> Tuple[int, str]:
        """GET following redirects; return (status, last redirect target or ``url``)."""

        headers: Dict[str, str] = {"User-Agent": self.user_agent}
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        async with aiohttp.ClientSession(timeout=client_timeout, headers=headers) as session:
            async with session.get(url, allow_redirects=True, max_redirects=self.max_redirects) as resp:
                final_url = str(resp.url) if resp.history else url
                return resp.status, final_url

    async def resolve(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> ResolveResult:
        status: Optional[int] = None
        try:
            target = require_http_url(url)
            status, final_url = await asyncio.wait_for(self._get(target, timeout), timeout=timeout)
            if not isinstance(status, int):
                raise InvalidResponse()
            if not self.is_success_status(status):
                raise ServerError(status)
        except GateError as exc:
            result = ResolveResult.failed(exc, status)
        except asyncio.TimeoutError:
            result = ResolveResult.failed(Timeout())
        except aiohttp.InvalidURL:
            result = ResolveResult.failed(InvalidUrl(url))
        except (aiohttp.TooManyRedirects, aiohttp.ClientResponseError) as exc:
            result = ResolveResult.failed(InvalidResponse(exc.message))
        except aiohttp.ClientError as exc:
            result = ResolveResult.failed(NetworkError(str(exc) or exc.__class__.__name__))
        except ValueError:
            result = ResolveResult.failed(InvalidUrl(url))
        else:
            result = ResolveResult.ok(final_url, status)
        logger.debug("resolve %s -> success=%s status=%s reason=%s", url, result.success, result.status, result.reason)
        return result

    async def resolve_with_device_id(
        self,
        url: str,
        device_id: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> ResolveResult:
        """Resolve ``url`` with ``push_id=<device_id>`` set on its query."""

        try:
            augmented = with_query_param(require_http_url(url), K_PARAM_DEVICE_ID, device_id)
        except InvalidUrl as exc:
            return ResolveResult.failed(exc)
        return await self.resolve(augmented, timeout)

    def resolve_sync(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> ResolveResult:
        return run_in_gate_loop(self.resolve(url, timeout))


__all__ = ["ResolveResult", "HttpResolver"]
