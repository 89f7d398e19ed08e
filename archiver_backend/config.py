from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ArchiverConfig:
    install_path: Path
    cache_path: Path
    base_domain: str
    authors_blacklist: tuple[str, ...] = field(default_factory=tuple)
    overwrite_url: bool = False
    enabled: bool = True
    log_level: str = "INFO"


def _env_bool(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean, got {raw!r}")


def _env_list(environ: Mapping[str, str], key: str) -> tuple[str, ...]:
    raw = environ.get(key) or ""
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def load_config(environ: Mapping[str, str] | None = None) -> ArchiverConfig:
    """Build the archiver configuration from environment variables.

    ARCHIVER_INSTALL_PATH     content installation root (default: cwd)
    ARCHIVER_CACHE_PATH       archive cache root (default: ./cache)
    ARCHIVER_BASE_DOMAIN      prefix for generated download URLs
    ARCHIVER_AUTHORS_BLACKLIST  comma-separated authors to leave untouched
    ARCHIVER_OVERWRITE_URL    replace download URLs that are already set
    ARCHIVER_ENABLED          serve downloads at all
    ARCHIVER_LOG_LEVEL        root log level
    """
    env = os.environ if environ is None else environ

    install_raw = env.get("ARCHIVER_INSTALL_PATH")
    install_path = Path(install_raw) if install_raw and install_raw.strip() else Path(".")

    cache_raw = env.get("ARCHIVER_CACHE_PATH")
    cache_path = Path(cache_raw) if cache_raw and cache_raw.strip() else Path("cache")

    # Avoid "http://host//download/..." when the domain is configured with a slash.
    base_domain = (env.get("ARCHIVER_BASE_DOMAIN") or "http://localhost:8010").strip().rstrip("/")

    return ArchiverConfig(
        install_path=install_path,
        cache_path=cache_path,
        base_domain=base_domain,
        authors_blacklist=_env_list(env, "ARCHIVER_AUTHORS_BLACKLIST"),
        overwrite_url=_env_bool(env, "ARCHIVER_OVERWRITE_URL", False),
        enabled=_env_bool(env, "ARCHIVER_ENABLED", True),
        log_level=(env.get("ARCHIVER_LOG_LEVEL") or "INFO").strip().upper(),
    )
