"""Settings loaded from environment variables.

One frozen Settings object per process; CLI options override single fields
with `dataclasses.replace`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

ENV_PREFIX = "TODOLIST"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(env: Mapping[str, str], name: str, default: str = "") -> str:
    v = env.get(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_path(env: Mapping[str, str], name: str, default: Optional[Path]) -> Optional[Path]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    data_path: Path = Path("tasks.json")
    autosave_interval: float = 2.0
    autosave_delay: float = 2.0
    log_level: str = "WARNING"
    log_file: Optional[Path] = None


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from `env` (os.environ by default); bad values fall back to defaults."""
    env = os.environ if env is None else env
    defaults = Settings()
    return Settings(
        data_path=_env_path(env, _k("DATA_PATH"), defaults.data_path),
        autosave_interval=_env_float(env, _k("AUTOSAVE_INTERVAL"), defaults.autosave_interval),
        autosave_delay=_env_float(env, _k("AUTOSAVE_DELAY"), defaults.autosave_delay),
        log_level=_env(env, _k("LOG_LEVEL"), defaults.log_level).upper(),
        log_file=_env_path(env, _k("LOG_FILE"), defaults.log_file),
    )
