"""Configuration loading for tlsgauge."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Set

from .safemode import DEFAULT_ALLOWED_SCOPES
from .utils import env_bool, env_int

try:  # pragma: no cover - Python >=3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - optional dependency path
    try:
        import tomli as tomllib  # type: ignore[assignment]
    except ModuleNotFoundError:  # pragma: no cover - fallback when tomli missing
        tomllib = None  # type: ignore[assignment]


CONFIG_PATH = Path.home() / ".config" / "tlsgauge" / "config.toml"

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_PROBE_WORKERS = 4
DEFAULT_BATCH_WORKERS = 8
DEFAULT_RETRIES = 1


@dataclass(frozen=True)
class RuntimeConfig:
    """Computed runtime configuration values."""

    allowed_scopes: Set[str]
    verbose: bool
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    probe_workers: int = DEFAULT_PROBE_WORKERS
    batch_workers: int = DEFAULT_BATCH_WORKERS
    retries: int = DEFAULT_RETRIES


def _load_file_config() -> dict[str, object]:
    if not CONFIG_PATH.exists():
        return {}
    raw = CONFIG_PATH.read_bytes()
    if tomllib is None:
        return {}
    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError):  # pragma: no cover - invalid toml
        return {}
    section = data.get("tlsgauge")
    if not isinstance(section, dict):
        return {}
    return section


def _env_allowed_scopes() -> Set[str]:
    value = os.getenv("TLSGAUGE_ALLOWED_SCOPES", "")
    scopes = {item.strip() for item in value.split(",") if item.strip()}
    return scopes


def _file_int(file_config: dict[str, object], key: str, default: int) -> int:
    value = file_config.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value


def _positive(value: Optional[int], fallback: int, *, minimum: int = 1) -> int:
    if value is None or value < minimum:
        return fallback
    return value


def load_config(
    *,
    cli_allowed_scopes: Optional[Iterable[str]] = None,
    cli_verbose: Optional[bool] = None,
    cli_timeout_ms: Optional[int] = None,
    cli_retries: Optional[int] = None,
) -> RuntimeConfig:
    """Compose runtime configuration respecting precedence."""

    file_config = _load_file_config()
    file_scopes = {
        scope
        for scope in file_config.get("allowed_scopes", [])
        if isinstance(scope, str) and scope
    }
    env_scopes = _env_allowed_scopes()
    combined_scopes: Set[str] = set(DEFAULT_ALLOWED_SCOPES)
    combined_scopes.update(file_scopes)
    combined_scopes.update(env_scopes)
    if cli_allowed_scopes:
        combined_scopes.update(cli_allowed_scopes)

    file_verbose = bool(file_config.get("verbose", False))
    env_verbose = env_bool("TLSGAUGE_VERBOSE", file_verbose)
    verbose = cli_verbose if cli_verbose is not None else env_verbose

    timeout_ms = env_int(
        "TLSGAUGE_TIMEOUT_MS", _file_int(file_config, "timeout_ms", DEFAULT_TIMEOUT_MS)
    )
    probe_workers = env_int(
        "TLSGAUGE_PROBE_WORKERS",
        _file_int(file_config, "probe_workers", DEFAULT_PROBE_WORKERS),
    )
    batch_workers = env_int(
        "TLSGAUGE_BATCH_WORKERS",
        _file_int(file_config, "batch_workers", DEFAULT_BATCH_WORKERS),
    )
    retries = env_int("TLSGAUGE_RETRIES", _file_int(file_config, "retries", DEFAULT_RETRIES))

    return RuntimeConfig(
        allowed_scopes=combined_scopes,
        verbose=verbose,
        timeout_ms=_positive(
            cli_timeout_ms, _positive(timeout_ms, DEFAULT_TIMEOUT_MS)
        ),
        probe_workers=_positive(probe_workers, DEFAULT_PROBE_WORKERS),
        batch_workers=_positive(batch_workers, DEFAULT_BATCH_WORKERS),
        retries=_positive(
            cli_retries, _positive(retries, DEFAULT_RETRIES, minimum=0), minimum=0
        ),
    )


__all__ = [
    "DEFAULT_BATCH_WORKERS",
    "DEFAULT_PROBE_WORKERS",
    "DEFAULT_RETRIES",
    "DEFAULT_TIMEOUT_MS",
    "RuntimeConfig",
    "load_config",
]
