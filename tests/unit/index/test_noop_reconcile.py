from __future__ import annotations

import json
from pathlib import Path

from scoop_search.index import BucketScan, BucketScanner, HashTracker, Reconciler


class _CountingScanner(BucketScanner):
    def __init__(self, buckets_dir: Path) -> None:
        super().__init__(buckets_dir)
        self.scanned: list[str] = []

    def scan_bucket(self, name: str) -> BucketScan:
        self.scanned.append(name)
        return super().scan_bucket(name)


def test_second_reconcile_without_fingerprint_change_is_noop(tmp_path: Path) -> None:
    buckets = tmp_path / "buckets"
    (buckets / "main" / ".git").mkdir(parents=True)
    (buckets / "main" / "git.json").write_text(json.dumps({"version": "2.44"}), encoding="utf-8")
    scanner = _CountingScanner(buckets)
    reconciler = Reconciler(scanner=scanner, tracker=HashTracker(runner=lambda cwd, args: "abc"))

    first = reconciler.reconcile({})
    assert first.stats.added == 1
    snapshot = {
        name: (entry.fingerprint, dict(entry.packages)) for name, entry in first.index.items()
    }

    second = reconciler.reconcile(first.index)

    assert second.index is first.index
    assert (second.stats.added, second.stats.removed, second.stats.updated) == (0, 0, 0)
    assert second.stats.changed_buckets == ()
    assert scanner.scanned == ["main"]
    assert {
        name: (entry.fingerprint, dict(entry.packages)) for name, entry in second.index.items()
    } == snapshot


def test_missing_buckets_root_yields_empty_noop(tmp_path: Path) -> None:
    reconciler = Reconciler(
        scanner=BucketScanner(tmp_path / "does-not-exist"),
        tracker=HashTracker(runner=lambda cwd, args: "abc"),
    )

    outcome = reconciler.reconcile({})

    assert outcome.index == {}
    assert outcome.stats.changed is False
