"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "scoop-search.toml"
DEFAULT_REFRESH_COMMAND = ("scoop", "update")
DEFAULT_MANIFEST_EXTENSIONS = (".json",)
SUPPORTED_MANIFEST_EXTENSIONS = (".json", ".yaml", ".yml")


@dataclass(slots=True, frozen=True)
class SearchConfig:
    """Fully merged search configuration."""

    scoop_root: Path
    buckets_dir: Path
    index_path: Path
    refresh_command: tuple[str, ...]
    manifest_extensions: tuple[str, ...]
    refresh_enabled: bool = True

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for diagnostics."""
        return {
            "scoop_root": str(self.scoop_root),
            "buckets_dir": str(self.buckets_dir),
            "index_path": str(self.index_path),
            "refresh_command": list(self.refresh_command),
            "refresh_enabled": self.refresh_enabled,
            "manifest_extensions": list(self.manifest_extensions),
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    scoop_root: Path | None = None
    index_path: Path | None = None
    refresh_enabled: bool | None = None


def resolve_scoop_root(environ: Mapping[str, str] | None = None) -> Path:
    """Use $SCOOP when set, else the scoop folder in the user profile."""
    env = os.environ if environ is None else environ
    value = env.get("SCOOP", "").strip()
    if value:
        return Path(value).expanduser()
    return Path.home() / "scoop"


def default_config(scoop_root: Path) -> SearchConfig:
    """Build default config for a given scoop root."""
    resolved_root = scoop_root.resolve()
    return SearchConfig(
        scoop_root=resolved_root,
        buckets_dir=resolved_root / "buckets",
        index_path=resolved_root / "cache" / "scoop-search" / "index.json",
        refresh_command=DEFAULT_REFRESH_COMMAND,
        manifest_extensions=DEFAULT_MANIFEST_EXTENSIONS,
    )


def load_config_file(scoop_root: Path) -> dict[str, object]:
    """Load optional scoop-search.toml from the scoop root."""
    config_path = scoop_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    try:
        with config_path.open("rb") as handle:
            payload = tomllib.load(handle)
    except OSError as error:
        raise ValueError(f"Cannot read {config_path}: {error}") from error
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _path_field(value: object, section: str, field: str, root: Path) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{section}.{field}' must be a non-empty string.")
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path.resolve()


def _manifest_extensions(value: object) -> tuple[str, ...]:
    extensions = _tuple_of_strings(value, "search", "manifest_extensions")
    if not extensions:
        raise ValueError("Config field 'search.manifest_extensions' must not be empty.")
    output: list[str] = []
    for item in extensions:
        normalized = item.strip().lower()
        if normalized not in SUPPORTED_MANIFEST_EXTENSIONS:
            raise ValueError(
                "Config field 'search.manifest_extensions' must only contain "
                f"{', '.join(SUPPORTED_MANIFEST_EXTENSIONS)}."
            )
        if normalized not in output:
            output.append(normalized)
    return tuple(output)


def merge_config(
    base: SearchConfig, file_payload: dict[str, object], overrides: CliOverrides
) -> SearchConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    search_payload = _get_table(file_payload, "search")
    root = base.scoop_root

    buckets_dir = base.buckets_dir
    if "buckets_dir" in search_payload:
        buckets_dir = _path_field(search_payload["buckets_dir"], "search", "buckets_dir", root)
    index_path = base.index_path
    if "index_path" in search_payload:
        index_path = _path_field(search_payload["index_path"], "search", "index_path", root)

    refresh_command = base.refresh_command
    if "refresh_command" in search_payload:
        refresh_command = _tuple_of_strings(
            search_payload["refresh_command"], "search", "refresh_command"
        )
        if not refresh_command:
            raise ValueError("Config field 'search.refresh_command' must not be empty.")

    manifest_extensions = base.manifest_extensions
    if "manifest_extensions" in search_payload:
        manifest_extensions = _manifest_extensions(search_payload["manifest_extensions"])

    merged = SearchConfig(
        scoop_root=root,
        buckets_dir=buckets_dir,
        index_path=index_path,
        refresh_command=refresh_command,
        manifest_extensions=manifest_extensions,
        refresh_enabled=base.refresh_enabled,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: SearchConfig, overrides: CliOverrides) -> SearchConfig:
    """Apply startup overrides at highest precedence."""
    index_path = overrides.index_path or config.index_path
    return SearchConfig(
        scoop_root=config.scoop_root,
        buckets_dir=config.buckets_dir,
        index_path=index_path.resolve(),
        refresh_command=config.refresh_command,
        manifest_extensions=config.manifest_extensions,
        refresh_enabled=(
            overrides.refresh_enabled
            if overrides.refresh_enabled is not None
            else config.refresh_enabled
        ),
    )


def load_effective_config(
    overrides: CliOverrides | None = None,
    environ: Mapping[str, str] | None = None,
) -> SearchConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    effective_overrides = overrides or CliOverrides()
    root = effective_overrides.scoop_root or resolve_scoop_root(environ)
    base = default_config(root)
    payload = load_config_file(base.scoop_root)
    return merge_config(base, payload, effective_overrides)
