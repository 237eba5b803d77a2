import json

import pytest
from typer.testing import CliRunner

from webscraper.cli.main import app
from webscraper.core.logging import Logger
from webscraper.engine.controller import ScrapeCycleController

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    monkeypatch.delenv("WEBSCRAPER_OUTPUT", raising=False)
    yield
    Logger.setup_logging()


def test_cli_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "webscraper" in result.output


def test_cli_version_flag():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("run", "once", "validate", "doctor"):
        assert command in result.output


def test_validate_accepts_good_configuration(write_json, config_data):
    path = write_json("config.json", config_data)
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 0
    assert "1 groups, 1 observers" in result.output


def test_validate_reports_errors(write_json, config_data):
    config_data["groups"][0]["observers"][0]["price"]["attribute"] = ""
    path = write_json("config.json", config_data)
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 1
    assert "price.attribute" in result.output


def test_validate_missing_file(tmp_path):
    result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])
    assert result.exit_code == 1


def test_once_writes_snapshot(monkeypatch, tmp_path, write_json, config_data, make_page, widget_site, session_factory):
    factory = session_factory(make_page(widget_site))
    monkeypatch.setattr(
        "webscraper.cli.commands.scrape.ScrapeCycleController",
        lambda settings: ScrapeCycleController(settings, factory),
    )
    config_path = write_json("config.json", config_data)
    output = tmp_path / "out" / "data.json"

    result = runner.invoke(app, ["once", str(config_path), "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text(encoding="utf-8"))[0]["items"] == [
        {"name": "Widget", "icon": "w.png", "price": "9.99"}
    ]
    assert "Widget" in result.output
    assert session_factory.sessions[0].closes == 1


def test_once_session_failure_exits_with_error(monkeypatch, write_json, config_data, session_factory):
    factory = session_factory(fail=True)
    monkeypatch.setattr(
        "webscraper.cli.commands.scrape.ScrapeCycleController",
        lambda settings: ScrapeCycleController(settings, factory),
    )
    result = runner.invoke(app, ["once", str(write_json("config.json", config_data))])
    assert result.exit_code == 1
    assert "Cycle failed" in result.output


def test_once_rejects_invalid_configuration(write_json, config_data):
    config_data["groups"][0]["observers"][0]["target"] = "never"
    result = runner.invoke(app, ["once", str(write_json("config.json", config_data))])
    assert result.exit_code == 1


def test_run_passes_settings_and_handles_interrupt(monkeypatch, tmp_path, write_json, config_data):
    seen = {}

    class FakeScheduler:
        def __init__(self, settings):
            seen["settings"] = settings

        async def run_forever(self, config):
            seen["config"] = config
            raise KeyboardInterrupt

    monkeypatch.setattr("webscraper.cli.commands.scrape.Scheduler", FakeScheduler)
    output = tmp_path / "data.json"

    result = runner.invoke(app, [
        "run", str(write_json("config.json", config_data)),
        "--output", str(output), "--interval", "5", "--headed",
    ])

    assert result.exit_code == 0
    assert seen["settings"].scrape_interval == 5
    assert seen["settings"].output == output
    assert seen["settings"].headless is False
    assert seen["config"].user == "u"
