import logging
from pathlib import Path

from stardom.logging_setup import CONSOLE_HANDLER, FILE_HANDLER, setup_logging, teardown_logging
from stardom.settings import LogSettings, OracleSettings, StorageSettings


def test_defaults_are_offline():
    s = OracleSettings()
    assert s.provider == "offline"
    assert s.timeout_seconds == 10.0


def test_env_prefixes(monkeypatch, tmp_path):
    monkeypatch.setenv("ORACLE_PROVIDER", "anthropic")
    monkeypatch.setenv("ORACLE_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("SAVE_DIRECTORY", str(tmp_path))
    monkeypatch.setenv("SAVE_KEY", "slot2")
    assert OracleSettings().provider == "anthropic"
    assert OracleSettings().timeout_seconds == 2.5
    storage = StorageSettings()
    assert storage.directory == Path(tmp_path)
    assert storage.key == "slot2"


def test_setup_logging_creates_the_log_file(tmp_path):
    logs = tmp_path / "logs"
    try:
        setup_logging(LogSettings(directory=logs, file_name="game.log", level="warning"))
        assert (logs / "game.log").exists()
    finally:
        teardown_logging()


def _ours():
    return [h.get_name() for h in logging.getLogger().handlers if h.get_name() in (FILE_HANDLER, CONSOLE_HANDLER)]


def test_setup_logging_twice_keeps_one_pair_of_handlers(tmp_path):
    settings = LogSettings(directory=tmp_path, file_name="game.log", level="error")
    try:
        setup_logging(settings)
        setup_logging(settings)
        assert sorted(_ours()) == [CONSOLE_HANDLER, FILE_HANDLER]
        logging.getLogger("stardom.test").debug("quiet on the console")
        assert "quiet on the console" in (tmp_path / "game.log").read_text(encoding="utf-8")
    finally:
        teardown_logging()
    assert _ours() == []
