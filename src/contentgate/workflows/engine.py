"""Content-availability gating engine.

Decides once per cache key whether a client should reveal external web
content or fall back to native content, then keeps the external destination
fresh on every later call::

    UNDECIDED --(all checks pass)--> EXTERNAL_SHOWN
    UNDECIDED --(any check fails)--> NATIVE_SHOWN      (terminal)
    EXTERNAL_SHOWN --(revalidate)--> EXTERNAL_SHOWN    (final_url may change)

The public ``evaluate`` never raises for network or URL problems; every
failure is folded into ``GateDecision.reason``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ..core.keys import (
    K_HAS_SHOWN_EXTERNAL,
    K_HAS_SHOWN_NATIVE,
    K_PARAM_PATH_ID,
    K_SAVED_PATH_ID,
    K_SAVED_URL,
)
from .gate_config import (
    CONNECTIVITY_TIMEOUT,
    DEFAULT_TIMEOUT,
    MAX_REDIRECTS,
    PROBE_HOST,
    PROBE_PORT,
    REASON_ALL_CHECKS_PASSED,
    REASON_CACHED_NATIVE,
    REASON_EMPTY_DESTINATION,
    REASON_RECOVERED,
    REASON_SERVER_CHECK_FAILED,
    REASON_VALID_CACHED,
    STORE_PATH,
    UNSUPPORTED_MODELS,
    USER_AGENT,
)
from .gate_errors import DateNotReached, GateError, InvalidUrl, NoConnectivity, UnsupportedDevice
from .gate_utils import extract_query_param, run_in_gate_loop, stable_url_hash, with_query_param
from .identity import DeviceIdentity, current_device_model
from .probe import ConnectivityProbe
from .resolver import HttpResolver
from .store import JsonFileStore, KeyValueStore

logger = logging.getLogger(__name__)

TargetDate = Union[datetime, float, int]


def _env_float(name: str, default: float) -> float:
    try:
        raw = os.getenv(name, "")
        return float(raw) if raw.strip() else default
    except (TypeError, ValueError):
        return default


def _env_int(name: str, default: int) -> int:
    try:
        raw = os.getenv(name, "")
        return int(raw) if raw.strip() else default
    except (TypeError, ValueError):
        return default


def _env_csv(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name, "")
    tokens = tuple(token.strip() for token in raw.split(",") if token.strip())
    return tokens or default


@dataclass
class GateConfig:
    """Configuration parameters for the gate and its collaborators."""

    timeout: float = DEFAULT_TIMEOUT
    connectivity_timeout: float = CONNECTIVITY_TIMEOUT
    probe_host: str = PROBE_HOST
    probe_port: int = PROBE_PORT
    store_path: Path = STORE_PATH
    user_agent: str = USER_AGENT
    max_redirects: int = MAX_REDIRECTS
    unsupported_models: Tuple[str, ...] = UNSUPPORTED_MODELS

    @classmethod
    def from_env(cls) -> "GateConfig":
        store_path = os.getenv("CONTENTGATE_STORE_PATH")
        return cls(
            timeout=_env_float("CONTENTGATE_TIMEOUT", DEFAULT_TIMEOUT),
            connectivity_timeout=_env_float("CONTENTGATE_CONNECTIVITY_TIMEOUT", CONNECTIVITY_TIMEOUT),
            probe_host=os.getenv("CONTENTGATE_PROBE_HOST") or PROBE_HOST,
            probe_port=_env_int("CONTENTGATE_PROBE_PORT", PROBE_PORT),
            store_path=Path(store_path) if store_path else STORE_PATH,
            user_agent=os.getenv("CONTENTGATE_USER_AGENT") or USER_AGENT,
            max_redirects=_env_int("CONTENTGATE_MAX_REDIRECTS", MAX_REDIRECTS),
            unsupported_models=_env_csv("CONTENTGATE_UNSUPPORTED_MODELS", UNSUPPORTED_MODELS),
        )


@dataclass(frozen=True)
class GateDecision:
    should_show_external: bool
    final_url: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StateKeys:
    """Store keys for one cache key; the pathid key hangs off the original URL."""

    external: str
    native: str
    saved_url: str
    path_id: str

    @classmethod
    def for_key(cls, cache_key: str, url: str) -> "StateKeys":
        return cls(
            external=f"{K_HAS_SHOWN_EXTERNAL}{cache_key}",
            native=f"{K_HAS_SHOWN_NATIVE}{cache_key}",
            saved_url=f"{K_SAVED_URL}{cache_key}",
            path_id=f"{K_SAVED_PATH_ID}{stable_url_hash(url)}",
        )


@dataclass(frozen=True)
class GateState:
    """Read-only snapshot of the persisted state for a cache key."""

    has_shown_external: bool = False
    has_shown_native: bool = False
    cached_url: str = ""
    cached_path_id: str = ""

    @property
    def phase(self) -> str:
        if self.has_shown_external:
            return "external"
        if self.has_shown_native:
            return "native"
        return "undecided"

    @classmethod
    def load(cls, store: KeyValueStore, url: str, cache_key: Optional[str] = None) -> "GateState":
        keys = StateKeys.for_key(cache_key or url, url)
        return cls(
            has_shown_external=store.get_bool(keys.external),
            has_shown_native=store.get_bool(keys.native),
            cached_url=store.get_string(keys.saved_url) or "",
            cached_path_id=store.get_string(keys.path_id) or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["phase"] = self.phase
        return payload


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: TargetDate) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


class GateEngine:
    """Decides, caches and revalidates the external-content gate."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        identity: Optional[DeviceIdentity] = None,
        probe: Optional[ConnectivityProbe] = None,
        resolver: Optional[HttpResolver] = None,
        device_model: Callable[[], str] = current_device_model,
        config: Optional[GateConfig] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config or GateConfig()
        self.store = store
        self.identity = identity or DeviceIdentity(store)
        self.probe = probe or ConnectivityProbe(self.config.probe_host, self.config.probe_port)
        self.resolver = resolver or HttpResolver(
            user_agent=self.config.user_agent,
            max_redirects=self.config.max_redirects,
        )
        self.device_model = device_model
        self.clock = clock

    def evaluate(
        self,
        url: str,
        target_date: TargetDate,
        check_device: bool = True,
        timeout: Optional[float] = None,
        cache_key: Optional[str] = None,
    ) -> GateDecision:
        """Blocking form of :meth:`aevaluate`."""

        return run_in_gate_loop(self.aevaluate(url, target_date, check_device, timeout, cache_key))

    async def aevaluate(
        self,
        url: str,
        target_date: TargetDate,
        check_device: bool = True,
        timeout: Optional[float] = None,
        cache_key: Optional[str] = None,
    ) -> GateDecision:
        timeout = self.config.timeout if timeout is None else timeout
        keys = StateKeys.for_key(cache_key or url, url)

        if self.store.get_bool(keys.external):
            return await self._revalidate(url, keys, timeout)

        if self.store.get_bool(keys.native):
            logger.debug("cache key %s already routed to native content", cache_key or url)
            return GateDecision(False, "", REASON_CACHED_NATIVE)

        try:
            await self._check_connectivity()
            self._check_target_date(target_date)
            if check_device:
                self._check_device()
        except GateError as exc:
            return self._show_native(keys, str(exc))

        result = await self.resolver.resolve_with_device_id(url, self.identity.get_device_id(), timeout)
        if not result.success:
            return self._show_native(keys, f"{REASON_SERVER_CHECK_FAILED}: {result.reason}")

        self.store.set_bool(keys.external, True)
        self._remember(keys, result.final_url)
        logger.info("gate opened for %s -> %s", cache_key or url, result.final_url)
        return GateDecision(True, result.final_url, REASON_ALL_CHECKS_PASSED)

    async def _check_connectivity(self) -> None:
        if not await self.probe.has_connectivity(self.config.connectivity_timeout):
            raise NoConnectivity()

    def _check_target_date(self, target_date: TargetDate) -> None:
        if self.clock() < _as_aware(target_date):
            raise DateNotReached()

    def _check_device(self) -> None:
        model = self.device_model()
        if model in self.config.unsupported_models:
            raise UnsupportedDevice(model)

    def _show_native(self, keys: StateKeys, reason: str) -> GateDecision:
        self.store.set_bool(keys.native, True)
        logger.info("gate closed (%s); routing to native content", reason)
        return GateDecision(False, "", reason)

    def _remember(self, keys: StateKeys, final_url: str) -> None:
        self.store.set_string(keys.saved_url, final_url)
        path_id = extract_query_param(final_url, K_PARAM_PATH_ID)
        if path_id:
            self.store.set_string(keys.path_id, path_id)

    async def _revalidate(self, url: str, keys: StateKeys, timeout: float) -> GateDecision:
        cached_url = self.store.get_string(keys.saved_url) or ""
        if cached_url:
            result = await self.resolver.resolve_with_device_id(cached_url, self.identity.get_device_id(), timeout)
            if result.success:
                self._remember(keys, result.final_url)
                return GateDecision(True, result.final_url, REASON_VALID_CACHED)
            logger.info("cached destination failed (%s); attempting recovery", result.reason)
        else:
            logger.warning("external gate for %s has no cached destination; attempting recovery", url)

        recovery_url = url
        path_id = self.store.get_string(keys.path_id) or ""
        if path_id:
            try:
                recovery_url = with_query_param(url, K_PARAM_PATH_ID, path_id)
            except InvalidUrl:
                recovery_url = url
        result = await self.resolver.resolve(recovery_url, timeout)
        if result.success:
            self._remember(keys, result.final_url)
            return GateDecision(True, result.final_url, REASON_RECOVERED)

        logger.warning("recovery for %s failed (%s); keeping external mode with empty destination", url, result.reason)
        return GateDecision(True, "", REASON_EMPTY_DESTINATION)


ContentAvailabilityChecker = GateEngine


def build_default_engine(config: Optional[GateConfig] = None) -> GateEngine:
    """Engine wired to a JSON file store and live network collaborators."""

    cfg = config or GateConfig.from_env()
    return GateEngine(JsonFileStore(cfg.store_path), config=cfg)


def check_content_availability(
    url: str,
    target_date: TargetDate,
    check_device: bool = True,
    timeout: Optional[float] = None,
    cache_key: Optional[str] = None,
) -> GateDecision:
    return build_default_engine().evaluate(url, target_date, check_device, timeout, cache_key)


__all__ = [
    "GateConfig",
    "GateDecision",
    "GateState",
    "StateKeys",
    "GateEngine",
    "ContentAvailabilityChecker",
    "build_default_engine",
    "check_content_availability",
]
