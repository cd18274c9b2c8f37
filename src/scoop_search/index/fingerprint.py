"""Per-bucket fingerprints from version-control HEAD revisions."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from pathlib import Path

from scoop_search.index.models import FingerprintProbe

logger = logging.getLogger(__name__)

GitRunner = Callable[[Path, list[str]], str]


def run_git(cwd: Path, args: list[str]) -> str:
    """Run git in a directory and return stripped stdout."""
    completed = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=False,
        capture_output=True,
        text=True,
    )
    if completed.returncode != 0:
        raise RuntimeError(completed.stderr.strip() or "git command failed")
    return completed.stdout.strip()


class HashTracker:
    """Computes a fingerprint for a bucket directory."""

    def __init__(self, runner: GitRunner = run_git) -> None:
        self._runner = runner

    def fingerprint(self, bucket_path: Path) -> str | None:
        """Return the HEAD revision of a bucket, or None when unavailable."""
        return self.probe(bucket_path).value

    def probe(self, bucket_path: Path) -> FingerprintProbe:
        """Look up the HEAD revision and report why none was found."""
        if not (bucket_path / ".git").exists():
            return FingerprintProbe(value=None, reason="no_vcs")
        try:
            revision = self._runner(bucket_path, ["rev-parse", "HEAD"])
        except (OSError, RuntimeError) as error:
            logger.debug("No fingerprint for %s: %s", bucket_path, error)
            return FingerprintProbe(value=None, reason="vcs_error")
        if not revision:
            return FingerprintProbe(value=None, reason="vcs_error")
        return FingerprintProbe(value=revision, reason="ok")
