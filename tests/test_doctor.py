from contentgate.workflows.doctor import build_doctor_report, format_doctor_report, redact_value


class StubProbe:
    host = "probe.local"
    port = 53

    def __init__(self, reachable: bool) -> None:
        self.reachable = reachable

    def check(self, timeout: float = 2.0) -> bool:
        return self.reachable


def test_redact_value() -> None:
    assert redact_value("") == ""
    assert redact_value("short") == "*****"
    assert redact_value("abcdefghijklmnop") == "abcd...mnop"
    assert redact_value("abcdefghij", keep=2) == "ab...ij"


def test_doctor_report_ok(tmp_path) -> None:
    report = build_doctor_report(store_path=tmp_path / "deep" / "store.json", probe=StubProbe(True))
    assert report["ok"] is True
    names = {check["name"]: check["status"] for check in report["checks"]}
    assert names["CONTENTGATE_STORE_PATH"] == "ok"
    assert names["connectivity"] == "ok"


def test_doctor_report_flags_unreachable_probe(tmp_path) -> None:
    report = build_doctor_report(store_path=tmp_path / "store.json", probe=StubProbe(False))
    assert report["ok"] is False
    text = format_doctor_report(report)
    assert text.startswith("contentgate doctor")
    assert "probe.local:53 unreachable" in text
