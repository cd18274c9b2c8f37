"""Incremental reconciliation of the grouped index against bucket contents."""

from __future__ import annotations

import logging

from scoop_search.index.fingerprint import HashTracker
from scoop_search.index.models import (
    BucketEntry,
    GroupedIndex,
    PackageDelta,
    ReconcileOutcome,
    ReconcileStats,
)
from scoop_search.index.scanner import BucketScanner

logger = logging.getLogger(__name__)


class Reconciler:
    """Rescans only the buckets whose fingerprint moved since the last pass.

    Buckets that disappear from disk are left in the index untouched; they are
    reported through ``ReconcileStats.orphaned_buckets`` instead.
    """

    def __init__(self, scanner: BucketScanner, tracker: HashTracker) -> None:
        self._scanner = scanner
        self._tracker = tracker

    def changed_buckets(
        self, index: GroupedIndex, buckets: tuple[str, ...]
    ) -> dict[str, str | None]:
        """Map each changed bucket to its newly observed fingerprint."""
        changed: dict[str, str | None] = {}
        for bucket in buckets:
            current = self._tracker.fingerprint(self._scanner.bucket_path(bucket))
            entry = index.get(bucket)
            previous = entry.fingerprint if entry is not None else None
            # None never matches, so buckets without VCS are always rescanned.
            if current is None or current != previous:
                changed[bucket] = current
        return changed

    def reconcile(self, index: GroupedIndex) -> ReconcileOutcome:
        """Update changed buckets of ``index`` in place and count the changes."""
        buckets = self._scanner.list_buckets()
        orphaned = tuple(sorted(set(index) - set(buckets)))
        for bucket in orphaned:
            logger.info("Bucket %r is no longer present; keeping its index entry", bucket)

        changed = self.changed_buckets(index, buckets)
        if not changed:
            return ReconcileOutcome(index=index, stats=ReconcileStats(orphaned_buckets=orphaned))

        added = 0
        updated = 0
        removed = 0
        for bucket in sorted(changed):
            entry = index.get(bucket)
            if entry is None:
                entry = BucketEntry()
                index[bucket] = entry
            scan = self._scanner.scan_bucket(bucket)
            delta = diff_packages(entry.packages, scan.packages)
            for name in delta.added:
                entry.packages[name] = scan.packages[name]
            for name in delta.updated:
                entry.packages[name] = scan.packages[name]
            for name in delta.removed:
                del entry.packages[name]
            entry.fingerprint = changed[bucket]
            added += len(delta.added)
            updated += len(delta.updated)
            removed += len(delta.removed)
            logger.debug(
                "Bucket %r: %d added, %d updated, %d removed",
                bucket,
                len(delta.added),
                len(delta.updated),
                len(delta.removed),
            )

        stats = ReconcileStats(
            added=added,
            removed=removed,
            updated=updated,
            changed_buckets=tuple(sorted(changed)),
            orphaned_buckets=orphaned,
        )
        logger.info(
            "Reconciled %d bucket(s): %d added, %d updated, %d removed",
            len(stats.changed_buckets),
            added,
            updated,
            removed,
        )
        return ReconcileOutcome(index=index, stats=stats)


def diff_packages(previous: dict[str, str], current: dict[str, str]) -> PackageDelta:
    """Compute deterministic added/updated/unchanged/removed package names."""
    previous_names = set(previous)
    current_names = set(current)

    added = sorted(current_names - previous_names)
    removed = sorted(previous_names - current_names)

    updated: list[str] = []
    unchanged: list[str] = []
    for name in sorted(previous_names & current_names):
        if previous[name] == current[name]:
            unchanged.append(name)
            continue
        updated.append(name)

    return PackageDelta(
        added=tuple(added),
        updated=tuple(updated),
        unchanged=tuple(unchanged),
        removed=tuple(removed),
    )
