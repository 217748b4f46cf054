"""High-level exports for the gate workflows."""

from .engine import (
    ContentAvailabilityChecker,
    GateConfig,
    GateDecision,
    GateEngine,
    GateState,
    build_default_engine,
    check_content_availability,
)
from .identity import DeviceIdentity
from .probe import ConnectivityProbe
from .resolver import HttpResolver, ResolveResult
from .store import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "ContentAvailabilityChecker",
    "GateConfig",
    "GateDecision",
    "GateEngine",
    "GateState",
    "build_default_engine",
    "check_content_availability",
    "DeviceIdentity",
    "ConnectivityProbe",
    "HttpResolver",
    "ResolveResult",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
]
