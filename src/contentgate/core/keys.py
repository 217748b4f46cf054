"""Shared store keys to avoid magic strings across contentgate modules."""

from __future__ import annotations

# Per cache-key gate state
K_HAS_SHOWN_EXTERNAL = "hasShownExternal_"
K_HAS_SHOWN_NATIVE = "hasShownApp_"
K_SAVED_URL = "savedUrl_"

# Per original-url routing token
K_SAVED_PATH_ID = "savedPathId_"

# Per install
K_DEVICE_ID = "analyticsUserID"

# Query parameters
K_PARAM_DEVICE_ID = "push_id"
K_PARAM_PATH_ID = "pathid"
