from __future__ import annotations

import json
from pathlib import Path

from scoop_search.index import BucketEntry, BucketScanner, HashTracker, Reconciler


def _write_manifest(bucket_dir: Path, name: str, version: str) -> None:
    manifests = bucket_dir / "bucket"
    manifests.mkdir(parents=True, exist_ok=True)
    (manifests / f"{name}.json").write_text(json.dumps({"version": version}), encoding="utf-8")


def _build_reconciler(buckets_dir: Path, revisions: dict[str, str]) -> Reconciler:
    for name in revisions:
        (buckets_dir / name / ".git").mkdir(parents=True, exist_ok=True)

    def runner(cwd: Path, args: list[str]) -> str:
        assert args == ["rev-parse", "HEAD"]
        return revisions[cwd.name]

    return Reconciler(scanner=BucketScanner(buckets_dir), tracker=HashTracker(runner=runner))


def test_changed_bucket_reports_update_and_add(tmp_path: Path) -> None:
    buckets = tmp_path / "buckets"
    _write_manifest(buckets / "main", "a", "2.0")
    _write_manifest(buckets / "main", "b", "1.0")
    reconciler = _build_reconciler(buckets, {"main": "rev-2"})
    index = {"main": BucketEntry(fingerprint="rev-1", packages={"a": "1.0"})}

    outcome = reconciler.reconcile(index)

    assert outcome.stats.added == 1
    assert outcome.stats.updated == 1
    assert outcome.stats.removed == 0
    assert outcome.stats.changed_buckets == ("main",)
    assert outcome.index["main"].packages == {"a": "2.0", "b": "1.0"}
    assert outcome.index["main"].fingerprint == "rev-2"


def test_missing_manifest_is_reported_as_removed(tmp_path: Path) -> None:
    buckets = tmp_path / "buckets"
    _write_manifest(buckets / "main", "a", "1.0")
    reconciler = _build_reconciler(buckets, {"main": "rev-2"})
    index = {"main": BucketEntry(fingerprint="rev-1", packages={"a": "1.0", "b": "1.0"})}

    outcome = reconciler.reconcile(index)

    assert outcome.stats.added == 0
    assert outcome.stats.updated == 0
    assert outcome.stats.removed == 1
    assert outcome.index["main"].packages == {"a": "1.0"}


def test_new_bucket_is_scanned_and_added_to_index(tmp_path: Path) -> None:
    buckets = tmp_path / "buckets"
    _write_manifest(buckets / "extras", "firefox-esr", "115.0")
    reconciler = _build_reconciler(buckets, {"extras": "rev-1"})
    index: dict[str, BucketEntry] = {}

    outcome = reconciler.reconcile(index)

    assert outcome.stats.added == 1
    assert outcome.index["extras"] == BucketEntry(
        fingerprint="rev-1", packages={"firefox-esr": "115.0"}
    )


def test_fingerprint_is_recorded_even_without_package_changes(tmp_path: Path) -> None:
    buckets = tmp_path / "buckets"
    _write_manifest(buckets / "main", "a", "1.0")
    reconciler = _build_reconciler(buckets, {"main": "rev-2"})
    index = {"main": BucketEntry(fingerprint="rev-1", packages={"a": "1.0"})}

    outcome = reconciler.reconcile(index)

    assert (outcome.stats.added, outcome.stats.updated, outcome.stats.removed) == (0, 0, 0)
    assert outcome.stats.changed_buckets == ("main",)
    assert outcome.index["main"].fingerprint == "rev-2"


def test_only_changed_buckets_are_rescanned(tmp_path: Path) -> None:
    buckets = tmp_path / "buckets"
    _write_manifest(buckets / "main", "a", "1.0")
    _write_manifest(buckets / "extras", "b", "9.9")
    reconciler = _build_reconciler(buckets, {"main": "rev-1", "extras": "rev-2"})
    index = {
        "main": BucketEntry(fingerprint="rev-1", packages={"stale": "0.1"}),
        "extras": BucketEntry(fingerprint="rev-1", packages={}),
    }

    outcome = reconciler.reconcile(index)

    assert outcome.stats.changed_buckets == ("extras",)
    assert outcome.index["main"].packages == {"stale": "0.1"}
    assert outcome.index["extras"].packages == {"b": "9.9"}


def test_vanished_bucket_is_kept_and_reported(tmp_path: Path) -> None:
    buckets = tmp_path / "buckets"
    _write_manifest(buckets / "main", "a", "1.0")
    reconciler = _build_reconciler(buckets, {"main": "rev-1"})
    index = {
        "main": BucketEntry(fingerprint="rev-1", packages={"a": "1.0"}),
        "gone": BucketEntry(fingerprint="rev-9", packages={"old": "1.0"}),
    }

    outcome = reconciler.reconcile(index)

    assert outcome.stats.orphaned_buckets == ("gone",)
    assert outcome.stats.removed == 0
    assert outcome.index["gone"].packages == {"old": "1.0"}
