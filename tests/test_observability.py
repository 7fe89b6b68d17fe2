"""
Tests for observability — logging setup and level precedence.
"""

import logging
from pathlib import Path

from click.testing import CliRunner

from relinker.core.observability.logging_config import resolve_level, setup_logging
from relinker.main import cli


def _relinker_logger() -> logging.Logger:
    return logging.getLogger("relinker")


class TestResolveLevel:
    def test_default_warning(self):
        assert resolve_level(env={}) == logging.WARNING

    def test_env_var_case_insensitive(self):
        assert resolve_level(env={"RELINKER_LOG_LEVEL": "debug"}) == logging.DEBUG

    def test_unknown_env_level_falls_back(self):
        assert resolve_level(env={"RELINKER_LOG_LEVEL": "LOUD"}) == logging.WARNING

    def test_flags_beat_env_var(self):
        env = {"RELINKER_LOG_LEVEL": "DEBUG"}
        assert resolve_level(quiet=True, env=env) == logging.ERROR
        assert resolve_level(verbose=True, env=env) == logging.INFO

    def test_debug_beats_other_flags(self):
        assert resolve_level(debug=True, verbose=True, quiet=True, env={}) == logging.DEBUG


class TestSetupLogging:
    def test_configures_relinker_logger_only(self):
        root_handlers = list(logging.getLogger().handlers)
        logger = setup_logging(verbose=True, env={})

        assert logger is _relinker_logger()
        assert logger.level == logging.INFO
        assert logger.propagate is False
        assert logging.getLogger().handlers == root_handlers

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging(env={})
        setup_logging(env={})
        assert len(_relinker_logger().handlers) == 1

    def test_module_loggers_inherit(self):
        setup_logging(debug=True, env={})
        child = logging.getLogger("relinker.core.use_cases.resolve")
        assert child.getEffectiveLevel() == logging.DEBUG

    def test_log_file_defaults_to_debug(self, tmp_path: Path):
        log_file = tmp_path / "relinker.log"
        logger = setup_logging(quiet=True, env={"RELINKER_LOG_FILE": str(log_file)})
        assert logger.level == logging.DEBUG

        logging.getLogger("relinker.adapters.shell.runner").debug("apt-get update")
        for handler in logger.handlers:
            handler.flush()
        assert "apt-get update" in log_file.read_text()

    def test_log_file_level(self, tmp_path: Path):
        log_file = tmp_path / "relinker.log"
        logger = setup_logging(env={
            "RELINKER_LOG_FILE": str(log_file),
            "RELINKER_LOG_FILE_LEVEL": "info",
        })
        assert logger.level == logging.INFO

        logging.getLogger("relinker.test").debug("not written")
        logging.getLogger("relinker.test").info("written")
        for handler in logger.handlers:
            handler.flush()
        text = log_file.read_text()
        assert "written" in text
        assert "not written" not in text


class TestCLILogging:
    def test_debug_flag(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        CliRunner().invoke(cli, ["--debug", "requirements"])
        assert _relinker_logger().level == logging.DEBUG

    def test_env_var(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RELINKER_LOG_LEVEL", "INFO")
        CliRunner().invoke(cli, ["requirements"])
        assert _relinker_logger().level == logging.INFO

    def test_flag_beats_env_var(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RELINKER_LOG_LEVEL", "DEBUG")
        CliRunner().invoke(cli, ["--quiet", "requirements"])
        assert _relinker_logger().level == logging.ERROR
