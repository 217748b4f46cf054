from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .gate_config import CONNECTIVITY_TIMEOUT, PROBE_HOST, PROBE_PORT, STORE_PATH


def redact_value(value: str, keep: int = 4) -> str:
    raw = (value or "").strip()
    if not raw:
        return ""
    if len(raw) <= keep * 2:
        return "*" * len(raw)
    return f"{raw[:keep]}...{raw[-keep:]}"


def _check_writable(path: Path) -> bool:
    try:
        if path.exists():
            return os.access(path, os.W_OK)
        parent = path.parent
        while not parent.exists() and parent != parent.parent:
            parent = parent.parent
        return os.access(parent, os.W_OK)
    except OSError:
        return False


def build_doctor_report(*, store_path: Optional[Path] = None, probe: Any = None) -> Dict[str, Any]:
    report: Dict[str, Any] = {
        "generated_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
        "ok": True,
        "checks": [],
    }

    def add_check(
        name: str,
        status: bool,
        *,
        detail: Optional[str] = None,
        remedy: Optional[str] = None,
        level: str = "warn",
    ) -> None:
        entry = {
            "name": name,
            "status": "ok" if status else "missing",
            "level": level,
            "detail": detail,
        }
        if remedy:
            entry["remedy"] = remedy
        report["checks"].append(entry)
        if not status and level == "warn":
            report["ok"] = False

    store = Path(store_path or os.getenv("CONTENTGATE_STORE_PATH") or STORE_PATH)
    add_check(
        "CONTENTGATE_STORE_PATH",
        _check_writable(store),
        detail=str(store),
        remedy="Create the store directory or set CONTENTGATE_STORE_PATH to a writable location.",
    )

    if probe is None:
        from .probe import ConnectivityProbe

        probe = ConnectivityProbe(
            os.getenv("CONTENTGATE_PROBE_HOST") or PROBE_HOST,
            int(os.getenv("CONTENTGATE_PROBE_PORT") or PROBE_PORT),
        )
    reachable = probe.check(CONNECTIVITY_TIMEOUT)
    add_check(
        "connectivity",
        reachable,
        detail=f"{probe.host}:{probe.port} reachable" if reachable else f"{probe.host}:{probe.port} unreachable",
        remedy="Check network access or point CONTENTGATE_PROBE_HOST/PORT at a reachable endpoint.",
    )

    model = os.getenv("CONTENTGATE_DEVICE_MODEL")
    add_check(
        "CONTENTGATE_DEVICE_MODEL",
        bool(model),
        detail=f"device model override: {model}" if model else "device model read from platform",
        level="info",
    )

    return report


def format_doctor_report(report: Dict[str, Any]) -> str:
    lines: List[str] = []
    lines.append("contentgate doctor")
    lines.append(f"Generated: {report.get('generated_at')}")
    lines.append("")
    for check in report.get("checks", []):
        name = check.get("name", "check")
        status = check.get("status", "unknown")
        level = check.get("level", "info")
        lines.append(f"- [{level}] {name}: {status}")
        detail = check.get("detail")
        if detail:
            lines.append(f"  detail: {detail}")
        remedy = check.get("remedy")
        if remedy and status != "ok":
            lines.append(f"  remedy: {remedy}")
    return "\n".join(lines).rstrip() + "\n"
