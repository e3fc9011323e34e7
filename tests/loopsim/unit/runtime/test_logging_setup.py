from __future__ import annotations

import logging

from loopsim.api.logging import LoggingConfig
from loopsim.diagnostics.json_codec import loads
from loopsim.runtime.logging import (
    JsonFormatter,
    configure_logging,
    resolve_log_level_name,
    setup_logging,
    shutdown_logging,
)


def test_setup_logging_adds_handler_when_missing(monkeypatch) -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        root.handlers.clear()
        root.setLevel(logging.NOTSET)
        monkeypatch.setenv("LOOPSIM_LOG_LEVEL", "DEBUG")
        setup_logging()
        assert root.handlers
        assert root.level == logging.DEBUG
    finally:
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)


def test_setup_logging_does_not_override_existing_handlers() -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    sentinel = logging.NullHandler()
    try:
        root.handlers.clear()
        root.addHandler(sentinel)
        root.setLevel(logging.WARNING)
        setup_logging()
        assert root.handlers == [sentinel]
        assert root.level == logging.WARNING
    finally:
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)


def test_resolve_log_level_prefers_package_prefix(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOOPSIM_LOG_LEVEL", "error")
    assert resolve_log_level_name() == "ERROR"
    monkeypatch.delenv("LOOPSIM_LOG_LEVEL")
    assert resolve_log_level_name() == "WARNING"


def test_json_formatter_preserves_extra_fields() -> None:
    record = logging.LogRecord(
        name="loopsim.scheduler",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="task_failed id=%d",
        args=(3,),
        exc_info=None,
    )
    record.task_kind = "timer"

    payload = loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "loopsim.scheduler"
    assert payload["msg"] == "task_failed id=3"
    assert payload["fields"]["task_kind"] == "timer"


def test_configure_logging_streams_json_to_file(tmp_path) -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    log_path = tmp_path / "logs" / "run.jsonl"
    try:
        configure_logging(
            LoggingConfig(level_name="INFO", console_format="text", file_path=str(log_path))
        )
        logging.getLogger("loopsim.test").info("hello_file")
        shutdown_logging()
        lines = log_path.read_text(encoding="utf-8").splitlines()
        assert [loads(line)["msg"] for line in lines] == ["hello_file"]
    finally:
        shutdown_logging()
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)
