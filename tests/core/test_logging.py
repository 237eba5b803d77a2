import json
import logging

from webscraper.core.logging import Logger, log


def test_setup_logging_writes_master_and_json_logs(tmp_path):
    Logger.setup_logging(log_dir=tmp_path, verbose=True)
    try:
        log("Cycle done", level="info", items=3, group="G")
        for handler in Logger.get_logger().handlers:
            handler.flush()

        assert "Cycle done" in (tmp_path / "master.log").read_text(encoding="utf-8")
        event = json.loads((tmp_path / "events.json").read_text(encoding="utf-8").splitlines()[-1])
        assert event["message"] == "Cycle done"
        assert event["items"] == 3
        assert event["group"] == "G"
    finally:
        Logger.setup_logging()


def test_setup_logging_replaces_handlers():
    Logger.setup_logging()
    Logger.setup_logging()
    handlers = Logger.get_logger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)


def test_unknown_level_falls_back_to_info(caplog):
    with caplog.at_level(logging.INFO, logger="webscraper"):
        log("hello", level="nonsense")
    assert any(r.levelname == "INFO" and r.message == "hello" for r in caplog.records)
