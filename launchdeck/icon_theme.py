#===============================================================================
#  Launch Deck | icon_theme.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Reads icon theme manifests (index.theme) into IconThemeEntry values and
#  orders a theme's directories for a requested pixel size.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

from .config import xdg_data_dirs, xdg_data_home
from .constants import ICON_THEME_GROUP, ICON_THEME_INDEX
from .models import IconSizeType, IconThemeEntry, ThemeDirectory

logger = logging.getLogger(__name__)


def icon_base_dirs() -> List[Path]:
    """Folders that contain icon themes, highest precedence first."""
    dirs = [Path.home() / ".icons", xdg_data_home() / "icons"]
    dirs += [d / "icons" for d in xdg_data_dirs()]
    return dirs


def pixmap_dirs() -> List[Path]:
    """Unthemed icon folders searched after every theme."""
    return [xdg_data_home() / "pixmaps"] + [d / "pixmaps" for d in xdg_data_dirs()]


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def _int(section: configparser.SectionProxy, key: str, default: int) -> int:
    try:
        return int(section.get(key, str(default)).strip())
    except ValueError:
        return default


def _size_type(value: str) -> IconSizeType:
    try:
        return IconSizeType(value.strip())
    except ValueError:
        return IconSizeType.THRESHOLD


def load_theme(name: str, base_dirs: Sequence[Path]) -> Optional[IconThemeEntry]:
    """Build an IconThemeEntry from the first index.theme found for `name`.

    The theme's subdirectories are searched in every base folder that has
    a folder named after the theme.
    """
    roots = [b / name for b in base_dirs if (b / name).is_dir()]
    index_file = next((r / ICON_THEME_INDEX for r in roots if (r / ICON_THEME_INDEX).is_file()), None)
    if index_file is None:
        logger.debug("Icon theme %r not found", name)
        return None

    cp = configparser.ConfigParser(interpolation=None, strict=False, delimiters=("=",))
    cp.optionxform = str
    try:
        cp.read_string(index_file.read_text(encoding="utf-8", errors="replace"), source=str(index_file))
    except (OSError, configparser.Error) as e:
        logger.warning("Unreadable icon theme manifest %s: %s", index_file, e)
        return None
    if not cp.has_section(ICON_THEME_GROUP):
        logger.warning("Icon theme manifest %s has no [%s] group", index_file, ICON_THEME_GROUP)
        return None

    header = cp[ICON_THEME_GROUP]
    subdirs = _split_csv(header.get("Directories", "")) + _split_csv(header.get("ScaledDirectories", ""))

    directories: List[ThemeDirectory] = []
    seen: Set[str] = set()
    for subdir in subdirs:
        if subdir in seen or not cp.has_section(subdir):
            continue
        seen.add(subdir)
        section = cp[subdir]
        size = _int(section, "Size", 0)
        if size <= 0:
            continue
        for root in roots:
            directories.append(
                ThemeDirectory(
                    path=root / subdir,
                    size=size,
                    scale=max(1, _int(section, "Scale", 1)),
                    type=_size_type(section.get("Type", "Threshold")),
                    min_size=_int(section, "MinSize", size),
                    max_size=_int(section, "MaxSize", size),
                    threshold=_int(section, "Threshold", 2),
                )
            )

    parents = tuple(p for p in _split_csv(header.get("Inherits", "")) if p != name)
    return IconThemeEntry(name=name, directories=tuple(directories), parents=parents)


def load_theme_chain(
    name: str,
    base_dirs: Sequence[Path],
    fallbacks: Iterable[str] = (),
) -> List[IconThemeEntry]:
    """Theme, its parents depth-first, then fallback themes. Cycle-safe."""
    chain: List[IconThemeEntry] = []
    visited: Set[str] = set()

    def visit(theme_name: str) -> None:
        if theme_name in visited:
            return
        visited.add(theme_name)
        theme = load_theme(theme_name, base_dirs)
        if theme is None:
            return
        chain.append(theme)
        for parent in theme.parents:
            visit(parent)

    visit(name)
    for fallback in fallbacks:
        visit(fallback)
    return chain


def search_order(theme: IconThemeEntry, size: int) -> List[ThemeDirectory]:
    """Directories of `theme` in lookup order for a `size` pixel icon.

    Exact size first, then larger sizes (closest first), then scalable
    directories, then smaller sizes (closest first). A smaller raster is the
    last resort because it has to be upscaled.
    """
    exact: List[ThemeDirectory] = []
    larger: List[ThemeDirectory] = []
    scalable: List[ThemeDirectory] = []
    smaller: List[ThemeDirectory] = []

    for d in theme.directories:
        if d.type == IconSizeType.SCALABLE:
            scalable.append(d)
        elif d.matches(size):
            exact.append(d)
        elif d.effective_size > size:
            larger.append(d)
        else:
            smaller.append(d)

    larger.sort(key=lambda d: d.effective_size - size)
    smaller.sort(key=lambda d: size - d.effective_size)
    return exact + larger + scalable + smaller
