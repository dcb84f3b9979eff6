"""
Engine configuration from environment variables.

Variables (all optional):
    CORPUSRANK_SEARCH_LIMIT     default result cap for the search facade (20)
    CORPUSRANK_EXPAND_SYNONYMS  "true"/"false", expand queries by default (true)
    CORPUSRANK_EMBED_DIMS       hash embedding dimensionality (128)
    CORPUSRANK_BM25_K1          BM25 term saturation (1.2)
    CORPUSRANK_BM25_B           BM25 length normalization (0.75)
    LOG_LEVEL                   console log level (INFO)

`.env.local` (highest priority) or `.env` in the working directory is
loaded first when present.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .bm25.scorer import OkapiBM25
from .exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class EngineSettings:
    search_limit: int = 20
    expand_synonyms: bool = True
    embed_dims: int = 128
    bm25_k1: float = 1.2
    bm25_b: float = 0.75
    log_level: str = "INFO"

    def __post_init__(self):
        if self.search_limit < 0:
            raise InvalidConfigurationError(f"search_limit must be >= 0, got {self.search_limit}")
        if self.embed_dims <= 0:
            raise InvalidConfigurationError(f"embed_dims must be > 0, got {self.embed_dims}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise InvalidConfigurationError(f"Unknown log level: {self.log_level}")
        # OkapiBM25 validates k1/b
        self.bm25_scorer()

    @property
    def console_level(self) -> int:
        return logging.getLevelName(self.log_level)

    def bm25_scorer(self) -> OkapiBM25:
        return OkapiBM25(k1=self.bm25_k1, b=self.bm25_b)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise InvalidConfigurationError(f"{name} must be a number, got {value!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise InvalidConfigurationError(f"{name} must be true or false, got {value!r}")


def load_env_files(base_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Load .env.local (highest priority) or .env from base_dir.

    Returns:
        The file that was loaded, or None when neither exists
    """
    base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
    env_local = base_dir / ".env.local"
    env_file = base_dir / ".env"

    for candidate in (env_local, env_file):
        if candidate.exists():
            logger.debug(f"Loading environment from: {candidate}")
            load_dotenv(candidate, override=True)
            return candidate
    return None


def load_settings(base_dir: Optional[Path] = None, load_files: bool = True) -> EngineSettings:
    """
    Read EngineSettings from the environment.

    Raises:
        InvalidConfigurationError: a variable is present but malformed
    """
    if load_files:
        load_env_files(base_dir)

    return EngineSettings(
        search_limit=_env_int("CORPUSRANK_SEARCH_LIMIT", 20),
        expand_synonyms=_env_bool("CORPUSRANK_EXPAND_SYNONYMS", True),
        embed_dims=_env_int("CORPUSRANK_EMBED_DIMS", 128),
        bm25_k1=_env_float("CORPUSRANK_BM25_K1", 1.2),
        bm25_b=_env_float("CORPUSRANK_BM25_B", 0.75),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
