"""
Unit tests for environment configuration and logging setup.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from corpusrank.config import EngineSettings, load_env_files, load_settings
from corpusrank.exceptions import InvalidConfigurationError
from corpusrank.logging_config import KEEP_SESSION_LOGS, setup_logging

pytestmark = pytest.mark.unit

ENV_VARS = [
    "CORPUSRANK_SEARCH_LIMIT",
    "CORPUSRANK_EXPAND_SYNONYMS",
    "CORPUSRANK_EMBED_DIMS",
    "CORPUSRANK_BM25_K1",
    "CORPUSRANK_BM25_B",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Unset engine variables; values loaded from .env files are removed afterwards"""
    for name in ENV_VARS:
        # setenv first so monkeypatch restores the original state on teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestEngineSettings:
    """Test defaults and validation"""

    def test_defaults(self):
        settings = EngineSettings()

        assert settings.search_limit == 20
        assert settings.expand_synonyms is True
        assert settings.embed_dims == 128
        assert settings.bm25_k1 == 1.2
        assert settings.bm25_b == 0.75
        assert settings.console_level == logging.INFO

    @pytest.mark.parametrize("kwargs", [
        {"search_limit": -1},
        {"embed_dims": 0},
        {"log_level": "CHATTY"},
        {"bm25_k1": -1.0},
        {"bm25_b": 3.0},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidConfigurationError):
            EngineSettings(**kwargs)

    def test_bm25_scorer(self):
        scorer = EngineSettings(bm25_k1=1.6, bm25_b=0.3).bm25_scorer()
        assert (scorer.k1, scorer.b) == (1.6, 0.3)


class TestLoadSettings:
    """Test reading settings from environment variables"""

    def test_defaults_without_env(self, clean_env):
        assert load_settings(load_files=False) == EngineSettings()

    def test_reads_environment(self, clean_env):
        clean_env.setenv("CORPUSRANK_SEARCH_LIMIT", "7")
        clean_env.setenv("CORPUSRANK_EXPAND_SYNONYMS", "false")
        clean_env.setenv("CORPUSRANK_EMBED_DIMS", "64")
        clean_env.setenv("CORPUSRANK_BM25_K1", "1.5")
        clean_env.setenv("CORPUSRANK_BM25_B", "0.5")
        clean_env.setenv("LOG_LEVEL", "debug")

        settings = load_settings(load_files=False)

        assert settings.search_limit == 7
        assert settings.expand_synonyms is False
        assert settings.embed_dims == 64
        assert settings.bm25_k1 == 1.5
        assert settings.bm25_b == 0.5
        assert settings.console_level == logging.DEBUG

    @pytest.mark.parametrize("value,expected", [("1", True), ("YES", True), ("off", False), ("", True)])
    def test_boolean_spellings(self, clean_env, value, expected):
        clean_env.setenv("CORPUSRANK_EXPAND_SYNONYMS", value)
        assert load_settings(load_files=False).expand_synonyms is expected

    @pytest.mark.parametrize("name,value", [
        ("CORPUSRANK_SEARCH_LIMIT", "lots"),
        ("CORPUSRANK_SEARCH_LIMIT", "-3"),
        ("CORPUSRANK_EMBED_DIMS", "1.5"),
        ("CORPUSRANK_BM25_K1", "fast"),
        ("CORPUSRANK_EXPAND_SYNONYMS", "maybe"),
    ])
    def test_malformed_values(self, clean_env, name, value):
        clean_env.setenv(name, value)
        with pytest.raises(InvalidConfigurationError):
            load_settings(load_files=False)


class TestEnvFiles:
    """Test .env.local / .env loading"""

    def test_env_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("CORPUSRANK_SEARCH_LIMIT=9\n")

        assert load_env_files(tmp_path) == tmp_path / ".env"
        assert load_settings(tmp_path).search_limit == 9

    def test_env_local_takes_priority(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("CORPUSRANK_SEARCH_LIMIT=9\n")
        (tmp_path / ".env.local").write_text("CORPUSRANK_SEARCH_LIMIT=3\n")

        assert load_settings(tmp_path).search_limit == 3

    def test_no_files(self, clean_env, tmp_path):
        assert load_env_files(tmp_path) is None


class TestSetupLogging:
    """Test console/file handler configuration"""

    def test_console_only(self, root_logger):
        assert setup_logging(log_file=None, console_level=logging.WARNING) is None

        assert len(root_logger.handlers) == 1
        assert root_logger.handlers[0].level == logging.WARNING

    def test_session_file(self, root_logger, tmp_path):
        session_log = setup_logging(log_file=str(tmp_path / "logs" / "corpusrank.log"))

        assert session_log.exists()
        assert session_log.parent == tmp_path / "logs"
        assert any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers)

        logging.getLogger("corpusrank.test").debug("debug goes to the file")
        for handler in root_logger.handlers:
            handler.flush()
        assert "debug goes to the file" in session_log.read_text()

    def test_old_sessions_cleaned_up(self, root_logger, tmp_path):
        log_dir = tmp_path / "logs"
        log_dir.mkdir()
        for day in range(1, 8):
            (log_dir / f"corpusrank_2020010{day}_000000.log").write_text("old")

        setup_logging(log_file=str(log_dir / "corpusrank.log"))

        remaining = sorted(p.name for p in log_dir.glob("corpusrank_*.log"))
        assert len(remaining) == KEEP_SESSION_LOGS
        assert "corpusrank_20200101_000000.log" not in remaining
        assert "corpusrank_20200107_000000.log" in remaining

    def test_repeated_setup_does_not_duplicate_handlers(self, root_logger):
        setup_logging(log_file=None)
        setup_logging(log_file=None)
        assert len(root_logger.handlers) == 1
