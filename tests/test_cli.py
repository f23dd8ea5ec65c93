import dividend_calendar.cli as cli_module
from dividend_calendar.scrape_coordinator import RunMode


class FakeClient:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeCoordinator:
    def __init__(self, error=None):
        self.error = error
        self.last_mode = RunMode.WARM_UPDATE

    def run(self):
        if self.error:
            raise self.error
        return {"A": object(), "B": object()}


def test_main_runs_coordinator_and_closes_client(monkeypatch, capsys, tmp_path):
    client = FakeClient()
    seen = {}

    def fake_build_coordinator(config, c):
        seen["config"] = config
        seen["client"] = c
        return FakeCoordinator()

    monkeypatch.setattr(cli_module, "build_client", lambda config: client)
    monkeypatch.setattr(cli_module, "build_coordinator", fake_build_coordinator)

    code = cli_module.main(["--cache", str(tmp_path / "c.json"), "--workers", "3", "--timeout", "5"])

    assert code == 0
    assert client.closed is True
    assert seen["client"] is client
    assert seen["config"].max_workers == 3
    assert seen["config"].wait_timeout == 5.0
    assert seen["config"].cache_path == tmp_path / "c.json"
    assert "warm_update: 2 companies cached" in capsys.readouterr().out


def test_main_always_closes_client_on_exception(monkeypatch):
    client = FakeClient()
    monkeypatch.setattr(cli_module, "build_client", lambda config: client)
    monkeypatch.setattr(cli_module, "build_coordinator", lambda config, c: FakeCoordinator(RuntimeError("boom")))

    try:
        cli_module.main([])
        assert False, "Expected exception"
    except RuntimeError as e:
        assert "boom" in str(e)

    assert client.closed is True


def test_build_client_picks_fetcher(monkeypatch):
    monkeypatch.setattr(cli_module, "SeleniumClient", lambda: "browser-client")

    assert cli_module.build_client(cli_module.ScraperConfig(fetcher="browser")) == "browser-client"
    assert isinstance(cli_module.build_client(cli_module.ScraperConfig()), cli_module.HttpClient)


def test_build_coordinator_wires_config(tmp_path):
    config = cli_module.ScraperConfig(cache_path=tmp_path / "c.json", max_workers=2, detail_timeout=3)
    client = FakeClient()

    coordinator = cli_module.build_coordinator(config, client)

    assert coordinator.max_workers == 2
    assert coordinator.store.path == tmp_path / "c.json"
    assert coordinator.detail_page.timeout == 3
    assert coordinator.calendar_page.client is client
