"""Per-install device token and device-model lookup."""

from __future__ import annotations

import logging
import os
import platform
import random
from typing import Optional

from ..core.keys import K_DEVICE_ID
from .doctor import redact_value
from .gate_config import DEVICE_ID_ALPHABET, DEVICE_ID_MAX_LENGTH, DEVICE_ID_MIN_LENGTH
from .store import KeyValueStore

logger = logging.getLogger(__name__)


def generate_device_id(rng: Optional[random.Random] = None) -> str:
    """Random alphanumeric token, length uniform in [10, 20]."""

    source = rng or random.Random()
    length = source.randint(DEVICE_ID_MIN_LENGTH, DEVICE_ID_MAX_LENGTH)
    return "".join(source.choice(DEVICE_ID_ALPHABET) for _ in range(length))


class DeviceIdentity:
    """Lazily creates and persists the opaque token sent as ``push_id``."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = K_DEVICE_ID,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.key = key
        self._rng = rng

    def get_device_id(self) -> str:
        saved = self.store.get_string(self.key)
        if saved:
            return saved
        new_id = generate_device_id(self._rng)
        self.store.set_string(self.key, new_id)
        logger.info("generated device id %s", redact_value(new_id, keep=2))
        return new_id


def current_device_model() -> str:
    """Device model reported by the host; ``CONTENTGATE_DEVICE_MODEL`` wins."""

    override = (os.getenv("CONTENTGATE_DEVICE_MODEL") or "").strip()
    if override:
        return override
    return platform.machine() or "unknown"


__all__ = ["DeviceIdentity", "generate_device_id", "current_device_model"]
