"""Runtime settings for the memory store.

All knobs are read from environment variables with defaults, so the store
works against a local MongoDB out of the box.
"""

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    """Resolved runtime configuration."""

    mongo_uri: str = "mongodb://localhost:27017"
    db_name: str = "fitmemory"
    records_collection: str = "memories"
    aggregates_collection: str = "plan_history"
    use_transactions: bool = True  # needs a replica set
    server_selection_timeout_ms: int = 5000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, **overrides: Any) -> "Settings":
        """Build settings from env vars; keyword overrides win."""
        settings = cls(
            mongo_uri=os.getenv("MONGO_URI", cls.mongo_uri),
            db_name=os.getenv("FITMEMORY_DB", cls.db_name),
            records_collection=os.getenv(
                "FITMEMORY_RECORDS_COLLECTION", cls.records_collection
            ),
            aggregates_collection=os.getenv(
                "FITMEMORY_AGGREGATES_COLLECTION", cls.aggregates_collection
            ),
            use_transactions=_env_bool(
                "FITMEMORY_USE_TRANSACTIONS", cls.use_transactions
            ),
            server_selection_timeout_ms=_env_int(
                "FITMEMORY_SERVER_TIMEOUT_MS", cls.server_selection_timeout_ms
            ),
            log_level=os.getenv("FITMEMORY_LOG_LEVEL", cls.log_level).upper(),
        )
        for key, value in overrides.items():
            if not hasattr(settings, key):
                raise TypeError(f"Unknown setting: {key}")
            setattr(settings, key, value)
        return settings

    def asdict(self, redact: bool = True) -> Dict[str, Any]:
        """Convenience for logging; hides credentials in the URI."""
        data = asdict(self)
        if redact:
            data["mongo_uri"] = _redact_uri(self.mongo_uri)
        return data


def _redact_uri(uri: str) -> str:
    scheme, sep, rest = uri.partition("://")
    if not sep or "@" not in rest:
        return uri
    _, _, host = rest.rpartition("@")
    return f"{scheme}://***@{host}"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, resolving them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
