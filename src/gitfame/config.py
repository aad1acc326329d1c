from __future__ import annotations

import argparse
import dataclasses
import json
import os
from pathlib import Path

from .models import FilterSpec


class ConfigError(ValueError):
    pass


def default_jobs() -> int:
    return max(1, min(8, (os.cpu_count() or 4)))


@dataclasses.dataclass(frozen=True)
class FameOptions:
    repository: Path
    revision: str = "HEAD"
    order_by: str = "lines"
    use_committer: bool = False
    format: str = "tabular"
    filters: FilterSpec = FilterSpec()
    jobs: int = 1
    language_table: Path | None = None
    progress: bool = False


CONFIG_KEYS = (
    "repository",
    "revision",
    "order_by",
    "use_committer",
    "format",
    "extensions",
    "languages",
    "exclude",
    "restrict_to",
    "jobs",
    "language_table",
    "progress",
)


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        raise ConfigError(f"config file not found: {config_path}")
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"could not read config file {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_path} must contain a JSON object")
    unknown = sorted(k for k in data if k not in CONFIG_KEYS)
    if unknown:
        raise ConfigError(f"unknown keys in {config_path}: {', '.join(unknown)}")
    return data


def split_csv_value(value: object) -> tuple[str, ...] | None:
    """
    Normalize a list option: "a,b" or ["a", "b,c"] -> ("a", "b", "c").
    Missing or empty input means "no restriction" and yields None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        values = [value]
    elif isinstance(value, (list, tuple)):
        values = [str(v) for v in value]
    else:
        raise ConfigError(f"expected a string or a list of strings, got: {value!r}")
    out: list[str] = []
    for v in values:
        for part in v.split(","):
            part = part.strip()
            if part:
                out.append(part)
    return tuple(out) if out else None


def _pick(args: argparse.Namespace, config: dict, key: str, default: object) -> object:
    v = getattr(args, key, None)
    if v is not None:
        return v
    if key in config and config[key] is not None:
        return config[key]
    return default


def _as_bool(key: str, value: object) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(f"`{key}` must be true or false, got: {value!r}")


def build_options(args: argparse.Namespace, config: dict | None = None) -> FameOptions:
    cfg = config or {}

    repository = Path(str(_pick(args, cfg, "repository", Path.cwd())))
    revision = str(_pick(args, cfg, "revision", "HEAD")).strip()
    if not revision:
        raise ConfigError("revision must not be empty")

    try:
        jobs = int(str(_pick(args, cfg, "jobs", default_jobs())))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"`jobs` must be an integer: {e}") from e
    if jobs < 1:
        raise ConfigError(f"`jobs` must be at least 1, got: {jobs}")

    table = _pick(args, cfg, "language_table", None)

    return FameOptions(
        repository=repository,
        revision=revision,
        order_by=str(_pick(args, cfg, "order_by", "lines")),
        use_committer=_as_bool("use_committer", _pick(args, cfg, "use_committer", False)),
        format=str(_pick(args, cfg, "format", "tabular")),
        filters=FilterSpec(
            extensions=split_csv_value(_pick(args, cfg, "extensions", None)),
            languages=split_csv_value(_pick(args, cfg, "languages", None)),
            exclude=split_csv_value(_pick(args, cfg, "exclude", None)),
            restrict_to=split_csv_value(_pick(args, cfg, "restrict_to", None)),
        ),
        jobs=jobs,
        language_table=Path(str(table)) if table else None,
        progress=_as_bool("progress", _pick(args, cfg, "progress", False)),
    )
