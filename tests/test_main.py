import pytest

import main


class StubRunner:
    def __init__(self, error=None):
        self.error = error
        self.called = []

    def _run(self, name):
        self.called.append(name)
        if self.error:
            raise self.error

    def capture(self):
        self._run("capture")

    def parse(self):
        self._run("parse")

    def print_page(self):
        self._run("print")


@pytest.fixture
def stub(monkeypatch):
    runner = StubRunner()
    seen = {}

    def fake_build(config, fetch_quotes=None, fetch_news=None):
        seen["quotes"] = fetch_quotes
        seen["news"] = fetch_news
        return runner

    monkeypatch.setattr(main, "build_capture", fake_build)
    runner.seen = seen
    return runner


def test_default_command_is_capture(stub) -> None:
    assert main.main([]) == 0
    assert stub.called == ["capture"]
    assert stub.seen == {"quotes": None, "news": None}


@pytest.mark.parametrize("command, expected", [("parse", "parse"), ("print", "print")])
def test_named_commands(stub, command, expected) -> None:
    assert main.main([command]) == 0
    assert stub.called == [expected]


def test_enrichment_flags_are_forwarded(stub) -> None:
    main.main(["capture", "--quotes", "--news"])
    assert stub.seen == {"quotes": True, "news": True}


def test_failure_exits_with_one(stub) -> None:
    stub.error = RuntimeError("Could not find account")
    assert main.main(["capture"]) == 1


def test_script_entry_points_exit_with_status(stub) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main.parse_main()
    assert excinfo.value.code == 0
    assert stub.called == ["parse"]


def test_run_reports_config_status(stub, monkeypatch, caplog, tmp_path) -> None:
    from config.settings import AccountConfig, Config, PortalConfig

    config = Config(
        account=AccountConfig(identifier="p_1", name=""),
        portal=PortalConfig(cookie_path=tmp_path / "missing.json"),
    )
    monkeypatch.setattr(main, "get_config", lambda: config)

    with caplog.at_level("INFO", logger="portfolio_capture.main"):
        assert main.run("capture") == 0

    assert "✓ account configured" in caplog.text
    assert "✗ cookies configured" in caplog.text
