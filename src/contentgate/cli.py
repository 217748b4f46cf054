from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from .workflows.doctor import build_doctor_report, format_doctor_report
from .workflows.engine import GateConfig, GateEngine, GateState
from .workflows.identity import DeviceIdentity
from .workflows.store import JsonFileStore

load_dotenv()

app = typer.Typer(no_args_is_help=True, help="Content-availability gate.")


def _parse_target_date(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise typer.BadParameter(f"Not an ISO-8601 date: {value}")
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


def _config(store: Optional[Path]) -> GateConfig:
    config = GateConfig.from_env()
    if store is not None:
        config.store_path = store
    return config


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log gate decisions to stderr."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command("evaluate")
def evaluate_cmd(
    url: str = typer.Argument(..., help="Candidate destination URL."),
    target_date: Optional[str] = typer.Option(None, "--target-date", help="ISO-8601 date before which the gate stays closed (default: now)."),
    device_check: bool = typer.Option(True, "--device-check/--no-device-check", help="Reject unsupported device models."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="HTTP timeout in seconds."),
    cache_key: Optional[str] = typer.Option(None, "--cache-key", help="Key scoping persisted state (default: URL)."),
    store: Optional[Path] = typer.Option(None, "--store", help="JSON store path (default: CONTENTGATE_STORE_PATH)."),
    json_out: bool = typer.Option(False, "--json", help="Print the decision as JSON."),
) -> None:
    """Evaluate the gate for URL and print the decision."""
    when = _parse_target_date(target_date)
    config = _config(store)
    engine = GateEngine(JsonFileStore(config.store_path), config=config)
    decision = engine.evaluate(url, when, check_device=device_check, timeout=timeout, cache_key=cache_key)
    if json_out:
        sys.stdout.write(json.dumps(decision.to_dict(), ensure_ascii=False) + "\n")
        raise typer.Exit(code=0)
    mode = "external" if decision.should_show_external else "native"
    typer.echo(f"{mode}: {decision.final_url or '-'}")
    typer.echo(f"reason: {decision.reason}")


@app.command("state")
def state_cmd(
    url: str = typer.Argument(..., help="Original destination URL."),
    cache_key: Optional[str] = typer.Option(None, "--cache-key", help="Key scoping persisted state (default: URL)."),
    store: Optional[Path] = typer.Option(None, "--store", help="JSON store path (default: CONTENTGATE_STORE_PATH)."),
) -> None:
    """Print the persisted gate state for URL as JSON."""
    config = _config(store)
    state = GateState.load(JsonFileStore(config.store_path), url, cache_key)
    sys.stdout.write(json.dumps(state.to_dict(), ensure_ascii=False) + "\n")


@app.command("device-id")
def device_id_cmd(
    store: Optional[Path] = typer.Option(None, "--store", help="JSON store path (default: CONTENTGATE_STORE_PATH)."),
) -> None:
    """Print the per-install device token, creating it on first use."""
    config = _config(store)
    typer.echo(DeviceIdentity(JsonFileStore(config.store_path)).get_device_id())


@app.command("doctor")
def doctor_cmd(
    store: Optional[Path] = typer.Option(None, "--store", help="JSON store path to check."),
) -> None:
    """Print environment diagnostics."""
    report = build_doctor_report(store_path=store)
    typer.echo(format_doctor_report(report))
    raise typer.Exit(code=0 if report.get("ok", True) else 2)


if __name__ == "__main__":
    app()
