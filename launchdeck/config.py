#===============================================================================
#  Launch Deck | config.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-17
#
#  Summary
#  -------
#  XDG base directory helpers and the launcher settings
#  (settings.json merged over defaults, plus environment overrides).
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import configparser
import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import (
    APP_DIR_NAME,
    DEFAULT_ICON_SIZE,
    DEFAULT_ICON_THEME,
    ICON_CACHE_DIR_NAME,
    LOG_FILE_NAME,
    LOGS_DIR_NAME,
    SETTINGS_FILE_NAME,
    USAGE_FILE_NAME,
)

logger = logging.getLogger(__name__)


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(name, "").strip()
    # XDG: relative paths are invalid and must be ignored
    if value and os.path.isabs(value):
        return Path(value)
    return default


def xdg_data_home() -> Path:
    return _env_path("XDG_DATA_HOME", Path.home() / ".local" / "share")


def xdg_config_home() -> Path:
    return _env_path("XDG_CONFIG_HOME", Path.home() / ".config")


def xdg_cache_home() -> Path:
    return _env_path("XDG_CACHE_HOME", Path.home() / ".cache")


def xdg_data_dirs() -> List[Path]:
    raw = os.environ.get("XDG_DATA_DIRS", "").strip()
    if not raw:
        return [Path("/usr/local/share"), Path("/usr/share")]
    return [Path(p) for p in raw.split(os.pathsep) if p and os.path.isabs(p)]


def default_application_dirs() -> List[Path]:
    """Descriptor search path in precedence order (first match wins)."""
    return [xdg_data_home() / "applications"] + [d / "applications" for d in xdg_data_dirs()]


def gtk_icon_theme_name() -> Optional[str]:
    """Icon theme configured for GTK 3/4, if any."""
    for version in ("gtk-4.0", "gtk-3.0"):
        ini = xdg_config_home() / version / "settings.ini"
        if not ini.is_file():
            continue
        cp = configparser.ConfigParser(interpolation=None)
        try:
            cp.read(ini, encoding="utf-8")
        except (configparser.Error, UnicodeDecodeError) as e:
            logger.debug("Ignoring unreadable %s: %s", ini, e)
            continue
        name = cp.get("Settings", "gtk-icon-theme-name", fallback="").strip().strip('"')
        if name:
            return name
    return None


def default_settings_path() -> Path:
    return xdg_config_home() / APP_DIR_NAME / SETTINGS_FILE_NAME


@dataclass
class Settings:
    application_dirs: List[Path] = field(default_factory=default_application_dirs)
    icon_theme: str = ""
    icon_size: int = DEFAULT_ICON_SIZE
    usage_path: Path = field(default_factory=lambda: xdg_data_home() / APP_DIR_NAME / USAGE_FILE_NAME)
    cache_dir: Path = field(default_factory=lambda: xdg_cache_home() / APP_DIR_NAME / ICON_CACHE_DIR_NAME)
    terminal: str = ""
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        if not self.icon_theme:
            self.icon_theme = gtk_icon_theme_name() or DEFAULT_ICON_THEME
        if self.log_file is None:
            self.log_file = self.logs_dir / LOG_FILE_NAME

    @property
    def logs_dir(self) -> Path:
        return self.usage_path.parent / LOGS_DIR_NAME


_PATH_KEYS = {"usage_path", "cache_dir", "log_file"}


def _coerce(key: str, value: Any) -> Any:
    if key == "application_dirs":
        if isinstance(value, str):
            value = value.split(os.pathsep)
        return [Path(os.path.expanduser(str(v))) for v in value if str(v).strip()]
    if key in _PATH_KEYS:
        return Path(os.path.expanduser(str(value))) if value else None
    if key == "icon_size":
        return int(value)
    return str(value)


def load_settings(settings_path: Optional[Path] = None) -> Settings:
    """Load settings from disk (or defaults), then apply environment overrides."""
    settings_path = settings_path or default_settings_path()
    data: Dict[str, Any] = {}
    if settings_path.exists():
        try:
            raw = json.loads(settings_path.read_text(encoding="utf-8"))
            if isinstance(raw, dict):
                data = raw
        except Exception as e:
            logger.warning("Could not load settings %s: %s", settings_path, e)

    known = {f.name for f in fields(Settings)}
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known or value is None:
            continue
        try:
            kwargs[key] = _coerce(key, value)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring setting %s=%r: %s", key, value, e)

    env_theme = os.environ.get("LAUNCHDECK_ICON_THEME", "").strip()
    if env_theme:
        kwargs["icon_theme"] = env_theme
    env_terminal = os.environ.get("LAUNCHDECK_TERMINAL", "").strip()
    if env_terminal:
        kwargs["terminal"] = env_terminal

    return Settings(**kwargs)
