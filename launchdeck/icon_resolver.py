#===============================================================================
#  Launch Deck | icon_resolver.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Maps an entry's Icon= value to a file on disk by walking the icon theme
#  chain: configured theme, its parents, fallback themes, pixmaps, and
#  finally the generic application icon. Not finding anything is a normal
#  outcome (None), never an error.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from .constants import (
    DEFAULT_ICON_THEME,
    FALLBACK_ICON_THEMES,
    ICON_EXTENSIONS,
    UNKNOWN_APP_ICON,
)
from .icon_theme import icon_base_dirs, load_theme_chain, pixmap_dirs, search_order
from .models import IconFormat, IconThemeEntry, ResolvedIcon, ThemeDirectory

logger = logging.getLogger(__name__)

_EXTENSION_FORMATS = {
    ".svg": IconFormat.VECTOR,
    ".svgz": IconFormat.VECTOR,
    ".png": IconFormat.RASTER,
    ".xpm": IconFormat.RASTER,
    ".jpg": IconFormat.RASTER,
    ".jpeg": IconFormat.RASTER,
    ".bmp": IconFormat.RASTER,
    ".gif": IconFormat.RASTER,
    ".ico": IconFormat.CONTAINER,
}


def detect_format(path: Path) -> Optional[IconFormat]:
    """Classify an icon file by its leading bytes, falling back to the extension."""
    try:
        with open(path, "rb") as f:
            head = f.read(512)
    except OSError:
        return None

    suffix = path.suffix.lower()
    if head.startswith(b"\x89PNG\r\n\x1a\n"):
        return IconFormat.RASTER
    if head[:4] == b"\x00\x00\x01\x00":
        return IconFormat.CONTAINER
    if head.startswith((b"\xff\xd8\xff", b"GIF87a", b"GIF89a", b"BM", b"/* XPM */")):
        return IconFormat.RASTER
    if head[:2] == b"\x1f\x8b" and suffix == ".svgz":
        return IconFormat.VECTOR
    if b"<svg" in head.lower():
        return IconFormat.VECTOR
    return _EXTENSION_FORMATS.get(suffix)


def icon_name(reference: str) -> str:
    """Strip a known image extension from a legacy Icon=foo.png value."""
    lowered = reference.lower()
    for ext in ICON_EXTENSIONS:
        if lowered.endswith(ext):
            return reference[: -len(ext)]
    return reference


class IconResolver:
    """Thread-safe icon lookup with per-(reference, size) memoization."""

    def __init__(
        self,
        theme: str = DEFAULT_ICON_THEME,
        base_dirs: Optional[Sequence[Path]] = None,
        pixmap_folders: Optional[Sequence[Path]] = None,
        fallback_themes: Sequence[str] = FALLBACK_ICON_THEMES,
        unknown_icon: str = UNKNOWN_APP_ICON,
    ):
        base_dirs = list(base_dirs) if base_dirs is not None else icon_base_dirs()
        self.themes: List[IconThemeEntry] = load_theme_chain(theme, base_dirs, fallback_themes)
        self.pixmap_folders: List[Path] = list(pixmap_folders) if pixmap_folders is not None else pixmap_dirs()
        self.unknown_icon = unknown_icon

        self._lock = threading.Lock()
        self._listings: Dict[Path, FrozenSet[str]] = {}
        self._orders: Dict[Tuple[str, int], List[ThemeDirectory]] = {}
        self._resolved: Dict[Tuple[str, int], Optional[ResolvedIcon]] = {}

        logger.info(
            "Icon theme chain: %s",
            " -> ".join(t.name for t in self.themes) or "(none found)",
        )

    def resolve(self, reference: Optional[str], preferred_size: int) -> Optional[ResolvedIcon]:
        key = (reference or "", preferred_size)
        with self._lock:
            if key in self._resolved:
                return self._resolved[key]

        result = self._resolve_uncached(reference or "", preferred_size)

        with self._lock:
            return self._resolved.setdefault(key, result)

    def _resolve_uncached(self, reference: str, size: int) -> Optional[ResolvedIcon]:
        reference = reference.strip()
        if reference:
            as_path = Path(reference)
            if as_path.is_absolute():
                if as_path.is_file():
                    fmt = detect_format(as_path)
                    if fmt is not None:
                        return ResolvedIcon(reference=reference, path=as_path, format=fmt)
                logger.debug("Icon path %s is missing or unsupported", reference)
            else:
                hit = self.lookup(icon_name(reference), size)
                if hit is not None:
                    return ResolvedIcon(reference=reference, path=hit[0], format=hit[1])

        hit = self.lookup(self.unknown_icon, size)
        if hit is not None:
            return ResolvedIcon(reference=reference, path=hit[0], format=hit[1], fallback=True)

        logger.debug("No icon for %r at %dpx", reference, size)
        return None

    def lookup(self, name: str, size: int) -> Optional[Tuple[Path, IconFormat]]:
        """First match for `name` along the theme chain, then the pixmaps folders."""
        for theme in self.themes:
            for directory in self._search_order(theme, size):
                hit = self._find_in_dir(directory.path, name)
                if hit is not None:
                    return hit
        for folder in self.pixmap_folders:
            hit = self._find_in_dir(folder, name)
            if hit is not None:
                return hit
        return None

    def _search_order(self, theme: IconThemeEntry, size: int) -> List[ThemeDirectory]:
        key = (theme.name, size)
        with self._lock:
            order = self._orders.get(key)
            if order is None:
                order = search_order(theme, size)
                self._orders[key] = order
            return order

    def _find_in_dir(self, directory: Path, name: str) -> Optional[Tuple[Path, IconFormat]]:
        files = self._listing(directory)
        if not files:
            return None
        for ext in ICON_EXTENSIONS:
            filename = name + ext
            if filename not in files:
                continue
            path = directory / filename
            fmt = detect_format(path)
            if fmt is not None:
                return path, fmt
        return None

    def _listing(self, directory: Path) -> FrozenSet[str]:
        with self._lock:
            cached = self._listings.get(directory)
        if cached is not None:
            return cached
        try:
            names = frozenset(os.listdir(directory))
        except OSError:
            names = frozenset()
        with self._lock:
            return self._listings.setdefault(directory, names)
