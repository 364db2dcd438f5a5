from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

import pytest

from vitalbridge.logwrapper import init_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for h in root.handlers:
        if h not in saved_handlers:
            h.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    logging.getLogger("uvicorn.access").setLevel(logging.NOTSET)


def test_file_log_receives_debug_records(tmp_path: Path, monkeypatch, restore_root):
    monkeypatch.delenv("LOG_FILE", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    path = tmp_path / "nested" / "bridge.log"
    init_logging({"file_path": str(path), "console_level": "warning"})

    logging.getLogger("vitals.serial").debug("Raw data: %r", "heart:72")
    for h in restore_root.handlers:
        h.flush()

    assert "Raw data: 'heart:72'" in path.read_text(encoding="utf-8")
    console = [h for h in restore_root.handlers if type(h) is logging.StreamHandler]
    assert console and console[0].level == logging.WARNING


def test_empty_log_file_env_disables_file(tmp_path: Path, monkeypatch, restore_root):
    monkeypatch.setenv("LOG_FILE", "")
    init_logging({"file_path": str(tmp_path / "bridge.log")})
    assert not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in restore_root.handlers)
    assert not (tmp_path / "bridge.log").exists()


def test_module_levels_applied(monkeypatch, restore_root):
    monkeypatch.setenv("LOG_FILE", "")
    init_logging({"module_levels": {"uvicorn.access": "warning"}})
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
