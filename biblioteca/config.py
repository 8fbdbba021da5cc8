# biblioteca/config.py
import os
from dataclasses import dataclass, field
from typing import Optional


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


@dataclass
class Settings:
    """Runtime settings, read from environment variables.

    Every field can be overridden by passing it explicitly, which is what the
    tests do. ``GRAPH_URL=memory`` selects the in-process rdflib store.
    """
    # Ledger
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///biblioteca.db"))
    database_pool_size: int = field(default_factory=lambda: _env_int("DATABASE_POOL_SIZE", "5"))
    database_timeout: float = field(default_factory=lambda: _env_float("DATABASE_TIMEOUT", "10"))

    # Graph store
    graph_url: str = field(default_factory=lambda: os.getenv("GRAPH_URL", "http://localhost:3030/biblioteca"))
    graph_query_path: str = field(default_factory=lambda: os.getenv("GRAPH_QUERY_PATH", "query"))
    graph_update_path: str = field(default_factory=lambda: os.getenv("GRAPH_UPDATE_PATH", "update"))
    graph_timeout: float = field(default_factory=lambda: _env_float("GRAPH_TIMEOUT", "10"))
    graph_retries: int = field(default_factory=lambda: _env_int("GRAPH_RETRIES", "3"))
    graph_retry_delay: float = field(default_factory=lambda: _env_float("GRAPH_RETRY_DELAY", "0.5"))
    graph_data_file: Optional[str] = field(default_factory=lambda: os.getenv("GRAPH_DATA_FILE"))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def uses_local_graph(self) -> bool:
        return self.graph_url == "memory"
