#===============================================================================
#  Launch Deck | constants.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-17
#
#  Summary
#  -------
#  Central place for file/folder naming conventions, ranking weights and
#  icon lookup tables.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

APP_TITLE = "Launch Deck"
APP_DIR_NAME = "launchdeck"
SETTINGS_FILE_NAME = "settings.json"
USAGE_FILE_NAME = "usage.json"
ICON_CACHE_DIR_NAME = "icons"
LOGS_DIR_NAME = "logs"
LOG_FILE_NAME = "launchdeck.log"

DESKTOP_ENTRY_GROUP = "Desktop Entry"
DESKTOP_FILE_SUFFIX = ".desktop"

# --- Icons ---
DEFAULT_ICON_SIZE = 32
DEFAULT_ICON_THEME = "hicolor"
FALLBACK_ICON_THEMES = ("hicolor",)
UNKNOWN_APP_ICON = "application-x-executable"
ICON_THEME_GROUP = "Icon Theme"
ICON_THEME_INDEX = "index.theme"

# Fixed lookup order inside one directory: vector, raster, container.
ICON_EXTENSIONS = (".svg", ".svgz", ".png", ".xpm", ".ico")

# --- Ranking ---
SIMILARITY_FLOOR = 0.3
NON_EXACT_CEILING = 0.99
USAGE_BOOST = 0.1
PENALTY_FACTOR = 0.9
PENALIZED_CATEGORIES = ("Settings",)
GENERIC_NAME_WEIGHT = 0.8
KEYWORD_WEIGHT = 0.7
# Low, but a short comment containing the query still clears SIMILARITY_FLOOR
COMMENT_WEIGHT = 0.4

# --- Usage ---
USAGE_HALF_LIFE_DAYS = 30.0
USAGE_RETENTION_DAYS = 90.0

# --- Launching ---
TERMINAL_CANDIDATES = ("x-terminal-emulator", "gnome-terminal", "konsole", "xterm")

# --- Workers ---
ICON_WORKERS = 4
