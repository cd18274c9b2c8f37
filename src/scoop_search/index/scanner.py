"""Bucket discovery and manifest version extraction."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import yaml

from scoop_search.index.models import BucketScan, ManifestParseResult

logger = logging.getLogger(__name__)

MANIFEST_SUBDIR = "bucket"
YAML_SUFFIXES = (".yaml", ".yml")


class BucketScanner:
    """Lists buckets under a root directory and reads their manifests."""

    def __init__(
        self, buckets_dir: Path, manifest_extensions: tuple[str, ...] = (".json",)
    ) -> None:
        self._buckets_dir = buckets_dir
        self._manifest_extensions = tuple(ext.lower() for ext in manifest_extensions)

    def bucket_path(self, name: str) -> Path:
        """Return the directory backing a bucket."""
        return self._buckets_dir / name

    def list_buckets(self) -> tuple[str, ...]:
        """Return bucket directory names in sorted order."""
        if not self._buckets_dir.is_dir():
            logger.warning("Buckets directory %s does not exist", self._buckets_dir)
            return ()
        try:
            with os.scandir(self._buckets_dir) as entries:
                names = [entry.name for entry in entries if entry.is_dir()]
        except OSError as error:
            logger.warning("Cannot list buckets in %s: %s", self._buckets_dir, error)
            return ()
        return tuple(sorted(names))

    def manifest_dir(self, name: str) -> Path:
        """Prefer the conventional bucket/ subfolder, else the bucket root."""
        root = self.bucket_path(name)
        nested = root / MANIFEST_SUBDIR
        if nested.is_dir():
            return nested
        return root

    def scan_bucket(self, name: str) -> BucketScan:
        """Read every manifest directly inside a bucket's manifest directory."""
        directory = self.manifest_dir(name)
        try:
            with os.scandir(directory) as entries:
                candidates = sorted(
                    (Path(entry.path) for entry in entries if entry.is_file()),
                    key=lambda path: path.name,
                )
        except OSError as error:
            logger.debug("Cannot read manifests of bucket %r: %s", name, error)
            return BucketScan(packages={})

        packages: dict[str, str] = {}
        skipped: list[str] = []
        for path in candidates:
            if path.suffix.lower() not in self._manifest_extensions:
                continue
            result = parse_manifest(path)
            if result.version is None:
                logger.debug("Skipping manifest %s: %s", path, result.error)
                skipped.append(path.name)
                continue
            if result.name in packages:
                logger.debug(
                    "Manifest %s overrides an earlier manifest for %r", path, result.name
                )
            packages[result.name] = result.version
        return BucketScan(packages=packages, skipped=tuple(skipped))


def parse_manifest(path: Path) -> ManifestParseResult:
    """Extract the version field of one manifest file."""
    name = path.stem
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as error:
        return ManifestParseResult(name=name, version=None, error=f"unreadable: {error}")

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            document = yaml.safe_load(text)
        else:
            document = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError, RecursionError) as error:
        return ManifestParseResult(name=name, version=None, error=f"invalid document: {error}")

    if not isinstance(document, dict):
        return ManifestParseResult(name=name, version=None, error="document is not a mapping")
    version = _as_version(document.get("version"))
    if version is None:
        return ManifestParseResult(name=name, version=None, error="missing version")
    return ManifestParseResult(name=name, version=version)


def _as_version(value: object) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None
