"""Substring search over the flattened package index."""

from __future__ import annotations

from scoop_search.index.models import BucketEntry, FlatIndex, GroupedIndex, SearchHit

SEPARATOR = "/"


def flatten(index: GroupedIndex) -> FlatIndex:
    """Map every package to a ``bucket/name`` key."""
    flat: FlatIndex = {}
    for bucket, entry in index.items():
        for name, version in entry.packages.items():
            flat[f"{bucket}{SEPARATOR}{name}"] = version
    return flat


def unflatten(flat: FlatIndex) -> GroupedIndex:
    """Group ``bucket/name`` keys back by bucket; fingerprints are not kept."""
    index: GroupedIndex = {}
    for key, version in flat.items():
        bucket, _, name = key.partition(SEPARATOR)
        index.setdefault(bucket, BucketEntry()).packages[name] = version
    return index


def search(flat: FlatIndex, query: str) -> list[SearchHit]:
    """Case-insensitive substring match against the full ``bucket/name`` key."""
    needle = query.lower()
    hits: list[SearchHit] = []
    for key, version in flat.items():
        if needle not in key.lower():
            continue
        source, _, name = key.partition(SEPARATOR)
        hits.append(SearchHit(name=name, version=version, source=source))
    hits.sort(key=lambda hit: (hit.name, hit.source))
    return hits


class SearchCache:
    """Flat lookup table derived from a grouped index, owned by one session."""

    def __init__(self) -> None:
        self._flat: FlatIndex | None = None
        self._build_count = 0

    @property
    def build_count(self) -> int:
        """Number of times the flat index has been built."""
        return self._build_count

    def get(self, index: GroupedIndex) -> FlatIndex:
        """Return the cached flat index, building it on first use."""
        if self._flat is None:
            return self.rebuild(index)
        return self._flat

    def rebuild(self, index: GroupedIndex) -> FlatIndex:
        """Replace the cached flat index wholesale."""
        self._flat = flatten(index)
        self._build_count += 1
        return self._flat

    def invalidate(self) -> None:
        self._flat = None

    def search(self, index: GroupedIndex, query: str) -> list[SearchHit]:
        return search(self.get(index), query)
