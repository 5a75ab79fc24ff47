"""Read fallback configuration values from a ``.env`` file.

The process environment always wins; the ``.env`` file only fills gaps, so a
developer can keep credentials out of their shell profile while CI injects
them as real environment variables.

The file location is ``UI_ENV_FILE`` when set, otherwise ``.env`` in the
current working directory.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict


def env_file_path() -> Path:
    return Path(os.environ.get("UI_ENV_FILE", ".env")).resolve()


def parse_env_file(text: str) -> Dict[str, str]:
    defaults: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
            value = value[1:-1]
        defaults[key.strip()] = value
    return defaults


@lru_cache(maxsize=1)
def _load_env_defaults() -> Dict[str, str]:
    env_file = env_file_path()
    if not env_file.exists():
        return {}
    return parse_env_file(env_file.read_text(encoding="utf-8"))


def get_env_default(key: str) -> str | None:
    return _load_env_defaults().get(key)


def getenv(key: str, default: str | None = None) -> str | None:
    """Environment variable, then ``.env`` entry, then ``default``."""
    value = os.environ.get(key)
    if value:
        return value
    return get_env_default(key) or default


def clear_cache() -> None:
    _load_env_defaults.cache_clear()
