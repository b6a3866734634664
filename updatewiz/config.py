"""
Settings, read once from ``UPDATEWIZ_*`` environment variables.

Nothing is persisted; CLI options override the environment via
``load_settings(**overrides)``.
"""

import logging
import os
import shlex
import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Tuple

from updatewiz.engine.errors import ConfigError
from updatewiz.safety.guardrails import SUDO_VALIDATE

logger = logging.getLogger(__name__)

ENV_PREFIX = "UPDATEWIZ_"
SCRIPT_NAME = "htotheizzo.sh"


@dataclass(frozen=True)
class Settings:
    script_path: Optional[Path] = None
    elevation_command: Tuple[str, ...] = SUDO_VALIDATE
    timeout: Optional[float] = None
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    log_file_level: Optional[str] = None


def find_script(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Look for htotheizzo.sh from ``start_dir`` upwards, then on PATH."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SCRIPT_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    found = shutil.which(SCRIPT_NAME) or shutil.which(SCRIPT_NAME[: -len(".sh")])
    return Path(found) if found else None


def _parse_timeout(raw) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid timeout: {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"Timeout must be positive, got {raw!r}")
    return value


def load_settings(environ=None, **overrides) -> Settings:
    """Build Settings from the environment. ``None`` overrides are ignored."""
    env = os.environ if environ is None else environ

    def get(name):
        return env.get(ENV_PREFIX + name) or None

    script = get("SCRIPT")
    elevation = get("ELEVATION")
    settings = Settings(
        script_path=Path(script).expanduser() if script else None,
        elevation_command=tuple(shlex.split(elevation)) if elevation else SUDO_VALIDATE,
        timeout=_parse_timeout(get("TIMEOUT")),
        log_level=get("LOG_LEVEL") or "WARNING",
        log_file=get("LOG_FILE"),
        log_file_level=get("LOG_FILE_LEVEL"),
    )

    overrides = {k: v for k, v in overrides.items() if v is not None}
    if "script_path" in overrides:
        overrides["script_path"] = Path(overrides["script_path"]).expanduser()
    if "timeout" in overrides:
        overrides["timeout"] = _parse_timeout(overrides["timeout"])
    unknown = set(overrides) - set(Settings.__dataclass_fields__)
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(sorted(unknown))}")
    settings = replace(settings, **overrides)

    if not settings.elevation_command:
        raise ConfigError("Elevation command is empty")
    if settings.script_path is None:
        settings = replace(settings, script_path=find_script())
    logger.debug("Settings: %s", settings)
    return settings
