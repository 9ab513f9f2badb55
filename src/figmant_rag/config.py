"""Environment-variable-based configuration."""

import os

from pydantic import BaseModel, Field

from figmant_rag.errors import ConfigurationError

_REQUIRED_VARS = ("FIGMANT_DATABASE_URL", "OPENAI_API_KEY")


def get_database_url() -> str | None:
    """Return the knowledge store location from FIGMANT_DATABASE_URL.

    A ``postgresql://`` URL selects the asyncpg backend; anything else is
    treated as a SQLite file path.
    """
    return os.environ.get("FIGMANT_DATABASE_URL") or None


def get_openai_api_key() -> str | None:
    """Return the embedding provider API key from OPENAI_API_KEY."""
    return os.environ.get("OPENAI_API_KEY") or None


def get_embedding_url() -> str:
    """Return the embedding API base URL from FIGMANT_EMBEDDING_URL."""
    return os.environ.get("FIGMANT_EMBEDDING_URL", "https://api.openai.com/v1").rstrip("/")


def get_embedding_model() -> str:
    """Return the embedding model name from FIGMANT_EMBEDDING_MODEL."""
    return os.environ.get("FIGMANT_EMBEDDING_MODEL", "text-embedding-3-small")


def get_embedding_dim() -> int:
    """Return the embedding vector dimensions from FIGMANT_EMBEDDING_DIM."""
    return int(os.environ.get("FIGMANT_EMBEDDING_DIM", "1536"))


def get_embedding_timeout() -> float:
    """Return the embedding request timeout in seconds from FIGMANT_EMBEDDING_TIMEOUT."""
    return float(os.environ.get("FIGMANT_EMBEDDING_TIMEOUT", "30.0"))


def get_log_level() -> str:
    """Return the logging level from FIGMANT_LOG_LEVEL."""
    return os.environ.get("FIGMANT_LOG_LEVEL", "WARNING").upper()


def is_manager_mode() -> bool:
    """Return True if FIGMANT_MANAGER is set to TRUE."""
    return os.environ.get("FIGMANT_MANAGER", "").upper() == "TRUE"


def get_transport() -> str:
    """Return the server transport from FIGMANT_TRANSPORT (http or stdio)."""
    return os.environ.get("FIGMANT_TRANSPORT", "http")


def get_host() -> str:
    """Return the HTTP bind host from FIGMANT_HOST."""
    return os.environ.get("FIGMANT_HOST", "127.0.0.1")


def get_port() -> int:
    """Return the HTTP bind port from FIGMANT_PORT."""
    return int(os.environ.get("FIGMANT_PORT", "8000"))


def validate_config() -> None:
    """Raise ConfigurationError if any required variable is unset."""
    missing = [name for name in _REQUIRED_VARS if not os.environ.get(name)]
    if missing:
        raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")


class RetrievalSettings(BaseModel):
    """Thresholds and caps for multi-strategy retrieval.

    These are heuristic defaults, not calibrated values.
    """

    vector_thresholds: list[float] = Field(default_factory=lambda: [0.3, 0.2, 0.15, 0.1])
    vector_limit: int = Field(default=8, ge=1)
    keyword_limit: int = Field(default=5, ge=1)
    keyword_similarity: float = Field(default=0.15, ge=0.0, le=1.0)
    category_limit: int = Field(default=3, ge=1)
    category_similarity: float = Field(default=0.1, ge=0.0, le=1.0)
    fallback_min_entries: int = Field(default=5, ge=0)
    fallback_limit: int = Field(default=10, ge=1)
    fallback_similarity: float = Field(default=0.05, ge=0.0, le=1.0)
    max_results: int = Field(default=20, ge=1)


def get_retrieval_settings() -> RetrievalSettings:
    """Return retrieval settings, honoring FIGMANT_VECTOR_THRESHOLDS and FIGMANT_MAX_RESULTS."""
    overrides: dict[str, object] = {}
    raw_thresholds = os.environ.get("FIGMANT_VECTOR_THRESHOLDS")
    if raw_thresholds:
        thresholds = [float(t) for t in raw_thresholds.split(",") if t.strip()]
        # Strictest first
        overrides["vector_thresholds"] = sorted(thresholds, reverse=True)
    raw_max = os.environ.get("FIGMANT_MAX_RESULTS")
    if raw_max:
        overrides["max_results"] = int(raw_max)
    return RetrievalSettings(**overrides)
