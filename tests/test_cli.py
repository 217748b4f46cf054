import json

from typer.testing import CliRunner

from contentgate.cli import app
from contentgate.workflows.probe import ConnectivityProbe

runner = CliRunner()


def _offline(monkeypatch) -> None:
    async def offline(self, timeout: float = 2.0) -> bool:
        return False

    monkeypatch.setattr(ConnectivityProbe, "has_connectivity", offline)


def test_evaluate_offline_routes_to_native(monkeypatch, tmp_path) -> None:
    _offline(monkeypatch)
    store = tmp_path / "store.json"

    result = runner.invoke(app, ["evaluate", "https://gate.example/start", "--store", str(store), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout.strip().splitlines()[-1])
    assert payload == {"should_show_external": False, "final_url": "", "reason": "No internet connection"}


def test_evaluate_plain_output_and_sticky_state(monkeypatch, tmp_path) -> None:
    _offline(monkeypatch)
    store = tmp_path / "store.json"
    url = "https://gate.example/start"

    runner.invoke(app, ["evaluate", url, "--store", str(store)])
    result = runner.invoke(app, ["evaluate", url, "--store", str(store), "--no-device-check"])

    assert result.exit_code == 0, result.output
    assert "native: -" in result.stdout
    assert "reason: Cached native content" in result.stdout

    state = runner.invoke(app, ["state", url, "--store", str(store)])
    assert json.loads(state.stdout)["phase"] == "native"


def test_evaluate_rejects_bad_target_date(tmp_path) -> None:
    result = runner.invoke(
        app,
        ["evaluate", "https://gate.example/start", "--target-date", "soon", "--store", str(tmp_path / "s.json")],
    )
    assert result.exit_code == 2


def test_device_id_is_stable(tmp_path) -> None:
    store = tmp_path / "store.json"
    first = runner.invoke(app, ["device-id", "--store", str(store)])
    second = runner.invoke(app, ["device-id", "--store", str(store)])
    assert first.exit_code == 0
    assert first.stdout.strip() == second.stdout.strip()
    assert 10 <= len(first.stdout.strip()) <= 20


def test_doctor_exit_codes(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(ConnectivityProbe, "check", lambda self, timeout=2.0: True)
    ok = runner.invoke(app, ["doctor", "--store", str(tmp_path / "store.json")])
    assert ok.exit_code == 0
    assert "connectivity: ok" in ok.stdout

    monkeypatch.setattr(ConnectivityProbe, "check", lambda self, timeout=2.0: False)
    bad = runner.invoke(app, ["doctor", "--store", str(tmp_path / "store.json")])
    assert bad.exit_code == 2
    assert "remedy:" in bad.stdout
