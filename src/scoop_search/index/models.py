"""Typed models for indexing state."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class BucketEntry:
    """Recorded state of one bucket: its fingerprint and known packages."""

    fingerprint: str | None = None
    packages: dict[str, str] = field(default_factory=dict)


GroupedIndex = dict[str, BucketEntry]
FlatIndex = dict[str, str]


@dataclass(slots=True, frozen=True)
class BucketScan:
    """Packages found in one bucket plus manifests that yielded nothing."""

    packages: dict[str, str]
    skipped: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class ManifestParseResult:
    """Outcome of reading one manifest file."""

    name: str
    version: str | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.version is not None


@dataclass(slots=True, frozen=True)
class FingerprintProbe:
    """Fingerprint lookup outcome; reason is ok, no_vcs or vcs_error."""

    value: str | None
    reason: str


@dataclass(slots=True, frozen=True)
class IndexLoadResult:
    """Loaded index and, when it had to be defaulted to empty, why."""

    index: GroupedIndex
    error: str | None = None


@dataclass(slots=True, frozen=True)
class IndexSaveResult:
    """Outcome of persisting the grouped index."""

    ok: bool
    error: str | None = None


@dataclass(slots=True, frozen=True)
class PackageDelta:
    """Deterministic change classification for one bucket's packages."""

    added: tuple[str, ...]
    updated: tuple[str, ...]
    unchanged: tuple[str, ...]
    removed: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class ReconcileStats:
    """Aggregate counts of one reconciliation pass."""

    added: int = 0
    removed: int = 0
    updated: int = 0
    changed_buckets: tuple[str, ...] = ()
    orphaned_buckets: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.changed_buckets)


@dataclass(slots=True, frozen=True)
class ReconcileOutcome:
    """Reconciled index together with its stats."""

    index: GroupedIndex
    stats: ReconcileStats


@dataclass(slots=True, frozen=True)
class SearchHit:
    """One matching package."""

    name: str
    version: str
    source: str
