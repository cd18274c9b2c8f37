"""Persistent grouped index storage."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from scoop_search.index.models import BucketEntry, GroupedIndex, IndexLoadResult, IndexSaveResult

logger = logging.getLogger(__name__)


class IndexStore:
    """Reads and writes the grouped index as a single JSON document."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return on-disk index path."""
        return self._path

    def ensure_exists(self) -> None:
        """Create an empty persisted index if none exists yet."""
        if self._path.exists():
            return
        result = self.save({})
        if result.ok:
            logger.debug("Created empty index at %s", self._path)

    def load(self) -> GroupedIndex:
        """Return the persisted index, or an empty one when it cannot be used."""
        return self.read().index

    def read(self) -> IndexLoadResult:
        """Load the index and report why it was defaulted to empty, if it was."""
        if not self._path.exists():
            return IndexLoadResult(index={}, error="missing")
        try:
            raw = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            logger.debug("Index %s is unreadable: %s", self._path, error)
            return IndexLoadResult(index={}, error="unreadable")
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as error:
            logger.debug("Index %s is not valid JSON: %s", self._path, error)
            return IndexLoadResult(index={}, error="invalid_json")
        if not isinstance(payload, dict):
            logger.debug("Index %s does not hold a JSON object", self._path)
            return IndexLoadResult(index={}, error="not_an_object")

        index: GroupedIndex = {}
        for bucket in sorted(payload):
            entry = _parse_bucket_entry(payload[bucket])
            if entry is None:
                logger.debug("Dropping malformed index entry for bucket %r", bucket)
                continue
            index[bucket] = entry
        return IndexLoadResult(index=index)

    def save(self, index: GroupedIndex) -> IndexSaveResult:
        """Overwrite the persisted index; failures are reported, not raised."""
        payload = {
            bucket: {"hash": entry.fingerprint, "packages": dict(entry.packages)}
            for bucket, entry in index.items()
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._atomic_write_json(self._path, payload)
        except OSError as error:
            logger.warning("Could not save index to %s: %s", self._path, error)
            return IndexSaveResult(ok=False, error=str(error))
        return IndexSaveResult(ok=True)

    @staticmethod
    def _atomic_write_json(path: Path, payload: dict[str, object]) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, sort_keys=True, separators=(",", ":"))
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise


def _parse_bucket_entry(value: object) -> BucketEntry | None:
    if not isinstance(value, dict):
        return None
    fingerprint = value.get("hash")
    packages = value.get("packages", {})
    if fingerprint is not None and not isinstance(fingerprint, str):
        return None
    if not isinstance(packages, dict):
        return None
    for name, version in packages.items():
        if not isinstance(name, str) or not isinstance(version, str):
            return None
    return BucketEntry(fingerprint=fingerprint, packages=dict(packages))
