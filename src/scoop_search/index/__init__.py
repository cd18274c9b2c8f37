"""Indexing and search package."""

from .fingerprint import HashTracker, run_git
from .models import (
    BucketEntry,
    BucketScan,
    FingerprintProbe,
    FlatIndex,
    GroupedIndex,
    IndexLoadResult,
    IndexSaveResult,
    ManifestParseResult,
    PackageDelta,
    ReconcileOutcome,
    ReconcileStats,
    SearchHit,
)
from .reconcile import Reconciler, diff_packages
from .scanner import BucketScanner, parse_manifest
from .search import SearchCache, flatten, search, unflatten
from .store import IndexStore

__all__ = [
    "BucketEntry",
    "BucketScan",
    "BucketScanner",
    "FingerprintProbe",
    "FlatIndex",
    "GroupedIndex",
    "HashTracker",
    "IndexLoadResult",
    "IndexSaveResult",
    "IndexStore",
    "ManifestParseResult",
    "PackageDelta",
    "ReconcileOutcome",
    "ReconcileStats",
    "Reconciler",
    "SearchCache",
    "SearchHit",
    "diff_packages",
    "flatten",
    "parse_manifest",
    "run_git",
    "search",
    "unflatten",
]
