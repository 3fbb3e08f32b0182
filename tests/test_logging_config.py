from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog

from issue_publisher.config import load_settings
from issue_publisher.logging_config import LOG_FILE_NAME, LOGGER_NAME, configure_logging


def test_configure_logging_writes_json_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    settings = load_settings(log_dir=tmp_path / "logs", log_level="warning")

    log_file = configure_logging(settings)
    logging.getLogger(f"{LOGGER_NAME}.assets").warning("image download failed url=%s", "https://host/x.png")
    for handler in logging.getLogger(LOGGER_NAME).handlers:
        handler.flush()

    assert log_file == (tmp_path / "logs" / LOG_FILE_NAME).resolve()
    entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    warning = entries[-1]
    assert warning["event"] == "image download failed url=https://host/x.png"
    assert warning["level"] == "warning"
    assert warning["logger"] == "issue_publisher.assets"


def test_configure_logging_without_log_dir_only_uses_console(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    assert configure_logging(load_settings()) is None

    handlers = logging.getLogger(LOGGER_NAME).handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)
    assert not isinstance(handlers[0], logging.FileHandler)


def test_bound_event_path_is_attached_to_stdlib_records(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    log_file = configure_logging(load_settings(log_dir=tmp_path / "logs"))
    assert log_file is not None

    with structlog.contextvars.bound_contextvars(event_path="/tmp/event.json"):
        logging.getLogger(f"{LOGGER_NAME}.emitter").warning("overwriting existing bundle document")
    logging.getLogger(f"{LOGGER_NAME}.emitter").warning("after run")
    for handler in logging.getLogger(LOGGER_NAME).handlers:
        handler.flush()

    entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    inside, outside = entries[-2], entries[-1]
    assert inside["event_path"] == "/tmp/event.json"
    assert "timestamp" in inside
    assert "event_path" not in outside


def test_console_level_falls_back_to_info_for_unknown_names(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    configure_logging(load_settings(log_level="chatty"))

    (console,) = logging.getLogger(LOGGER_NAME).handlers
    assert console.level == logging.INFO
