"""Logging setup tests."""

import logging

from logging_config import setup_logging


def test_setup_logging_configures_root_once(tmp_path, monkeypatch):
    root = logging.RootLogger(logging.WARNING)
    monkeypatch.setattr(logging, "root", root)
    logfile = tmp_path / "app.log"

    setup_logging("debug", str(logfile))
    handlers = list(root.handlers)
    try:
        assert root.level == logging.DEBUG
        assert [type(h) for h in handlers] == [logging.StreamHandler, logging.FileHandler]

        # rerun of the app script keeps the existing handlers
        setup_logging("ERROR")
        assert root.handlers == handlers
        assert root.level == logging.DEBUG
    finally:
        for h in handlers:
            h.close()
