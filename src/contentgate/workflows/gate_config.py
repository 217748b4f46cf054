"""Gate defaults (timeouts, status band, probe endpoint, device models).

Centralizes static defaults so engine.py has no embedded magic numbers.
These are baseline constants used to construct a GateConfig; callers can
inject their own GateConfig to override any of them.
"""

from __future__ import annotations

from pathlib import Path

# Timeouts (seconds)
DEFAULT_TIMEOUT = 12.0
CONNECTIVITY_TIMEOUT = 2.0

# Inclusive status band treated as "content exists"
SUCCESS_STATUS_MIN = 200
SUCCESS_STATUS_MAX = 403

# Reachability probe
PROBE_HOST = "1.1.1.1"
PROBE_PORT = 53

# Redirects
MAX_REDIRECTS = 10

# Device identity
DEVICE_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
DEVICE_ID_MIN_LENGTH = 10
DEVICE_ID_MAX_LENGTH = 20

# Device-class gate
UNSUPPORTED_MODELS = ("iPad",)

# Paths (cwd-relative, like the fetch cache)
STORE_PATH = Path("run") / "contentgate" / "store.json"

USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)

# Decision reasons
REASON_ALL_CHECKS_PASSED = "All checks passed"
REASON_CACHED_NATIVE = "Cached native content"
REASON_VALID_CACHED = "Valid cached external content"
REASON_RECOVERED = "Recovered external content with pathid"
REASON_EMPTY_DESTINATION = "Failed to resolve destination, showing empty content"
REASON_SERVER_CHECK_FAILED = "Server check failed"
