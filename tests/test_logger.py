# tests/test_logger.py
import json
import logging
import sys
from logging.handlers import TimedRotatingFileHandler

from covergen.logger import JsonLineFormatter, build_handlers, get_logger


def _record(msg, level=logging.INFO, exc_info=None):
    return logging.LogRecord("covergen.test", level, __file__, 1, msg, None, exc_info)


def test_json_formatter_emits_cloud_logging_fields():
    line = JsonLineFormatter().format(_record("cover saved ✅", logging.WARNING))
    entry = json.loads(line)
    assert entry["severity"] == "WARNING"
    assert entry["logger"] == "covergen.test"
    assert entry["message"] == "cover saved ✅"
    assert "time" in entry and "exception" not in entry


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad brief")
    except ValueError:
        entry = json.loads(JsonLineFormatter().format(_record("failed", logging.ERROR, sys.exc_info())))
    assert "ValueError: bad brief" in entry["exception"]


def test_build_handlers_text_and_rotating_file(tmp_path):
    handlers = build_handlers("text")
    assert len(handlers) == 1
    assert not isinstance(handlers[0].formatter, JsonLineFormatter)

    handlers = build_handlers("json", str(tmp_path / "logs" / "covergen.log"))
    try:
        assert isinstance(handlers[1], TimedRotatingFileHandler)
        assert all(isinstance(h.formatter, JsonLineFormatter) for h in handlers)
        assert (tmp_path / "logs").is_dir()
    finally:
        for h in handlers:
            h.close()


def test_get_logger_names():
    assert get_logger("covergen.features.generate").name == "covergen.features.generate"
    assert get_logger().name == "covergen"
