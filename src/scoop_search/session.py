"""Search session: load, search, and refresh-then-reconcile on a miss."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass

from scoop_search.config import SearchConfig
from scoop_search.index import (
    BucketScanner,
    GroupedIndex,
    HashTracker,
    IndexStore,
    ReconcileStats,
    Reconciler,
    SearchCache,
    SearchHit,
)

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], None]


@dataclass(slots=True, frozen=True)
class LookupResult:
    """Hits for one query and what happened to produce them."""

    hits: list[SearchHit]
    refreshed: bool = False
    stats: ReconcileStats | None = None
    saved: bool | None = None


def make_refresh_command(command: tuple[str, ...]) -> RefreshCallback:
    """Build a callback that runs an external update command, ignoring failures."""

    def refresh() -> None:
        executable = shutil.which(command[0])
        if executable is None:
            logger.debug("Refresh command %r not found; skipping", command[0])
            return
        try:
            completed = subprocess.run([executable, *command[1:]], check=False)
        except OSError as error:
            logger.debug("Refresh command %r failed to start: %s", command[0], error)
            return
        if completed.returncode != 0:
            logger.debug("Refresh command exited with status %d", completed.returncode)

    return refresh


class SearchSession:
    """Owns the index store, reconciler and flat cache for one invocation."""

    def __init__(
        self,
        store: IndexStore,
        reconciler: Reconciler,
        refresh: RefreshCallback | None = None,
        cache: SearchCache | None = None,
    ) -> None:
        self._store = store
        self._reconciler = reconciler
        self._refresh = refresh
        self._cache = cache or SearchCache()
        self._index: GroupedIndex | None = None

    @property
    def cache(self) -> SearchCache:
        return self._cache

    def index(self) -> GroupedIndex:
        """Return the grouped index, loading it on first use."""
        if self._index is None:
            self._store.ensure_exists()
            self._index = self._store.load()
        return self._index

    def lookup(self, query: str) -> LookupResult:
        """Search the index; on a miss refresh sources, reconcile, and retry once."""
        hits = self._cache.search(self.index(), query)
        if hits:
            return LookupResult(hits=hits)

        if self._refresh is not None:
            self._refresh()
        stats, saved = self._reconcile()
        hits = self._cache.search(self.index(), query)
        return LookupResult(hits=hits, refreshed=True, stats=stats, saved=saved)

    def reindex(self) -> ReconcileStats:
        """Reconcile changed buckets without searching."""
        stats, _ = self._reconcile()
        return stats

    def _reconcile(self) -> tuple[ReconcileStats, bool | None]:
        outcome = self._reconciler.reconcile(self.index())
        self._index = outcome.index
        saved: bool | None = None
        if outcome.stats.changed:
            saved = self._store.save(outcome.index).ok
        self._cache.rebuild(outcome.index)
        return outcome.stats, saved


def create_session(config: SearchConfig) -> SearchSession:
    """Create a session wired to the configured directories and command."""
    scanner = BucketScanner(
        buckets_dir=config.buckets_dir,
        manifest_extensions=config.manifest_extensions,
    )
    refresh: RefreshCallback | None = None
    if config.refresh_enabled:
        refresh = make_refresh_command(config.refresh_command)
    return SearchSession(
        store=IndexStore(config.index_path),
        reconciler=Reconciler(scanner=scanner, tracker=HashTracker()),
        refresh=refresh,
    )
