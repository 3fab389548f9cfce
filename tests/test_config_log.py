import logging
import sys

from deliberate_thinking.core.config import Settings
from deliberate_thinking.core.log import ROOT_LOGGER, setup_logging


def test_settings_defaults(monkeypatch):
    for key in ("DELIBERATE_LOG_LEVEL", "DELIBERATE_LOG_JSON", "DELIBERATE_SESSION_NAME"):
        monkeypatch.delenv(key, raising=False)
    s = Settings.from_env()
    assert s == Settings(log_level="INFO", log_json=False, session_name="deliberate-thinking")


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DELIBERATE_LOG_LEVEL", "debug")
    monkeypatch.setenv("DELIBERATE_LOG_JSON", "yes")
    monkeypatch.setenv("DELIBERATE_SESSION_NAME", "planning")
    s = Settings.from_env()
    assert s.log_level == "DEBUG"
    assert s.log_json is True
    assert s.session_name == "planning"


def test_setup_logging_installs_single_handler():
    setup_logging(Settings(log_level="WARNING"))
    setup_logging(Settings(log_level="WARNING", log_json=True))
    root = logging.getLogger(ROOT_LOGGER)
    assert len(root.handlers) == 1
    assert root.level == logging.WARNING


def test_setup_logging_uses_plain_stderr_handler():
    setup_logging(Settings())
    (handler,) = logging.getLogger(ROOT_LOGGER).handlers
    assert type(handler) is logging.StreamHandler
    assert handler.stream is sys.stderr
