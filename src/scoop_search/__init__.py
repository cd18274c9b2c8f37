"""Incremental package index and substring search over local scoop buckets."""

from .config import CliOverrides, SearchConfig, load_effective_config
from .session import LookupResult, SearchSession, create_session

__all__ = [
    "CliOverrides",
    "LookupResult",
    "SearchConfig",
    "SearchSession",
    "create_session",
    "load_effective_config",
]
