#===============================================================================
#  Launch Deck | models.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Shared data models used across the launcher core.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from PySide6.QtGui import QImage


@dataclass(frozen=True)
class AppEntry:
    """Represents a launchable application parsed from a .desktop descriptor."""
    identifier: str                 # descriptor filename without .desktop
    name: str                       # Name=
    exec: str                       # Exec= command template
    path: str = ""                  # descriptor file on disk
    localized_name: Optional[str] = None
    generic_name: Optional[str] = None
    comment: Optional[str] = None
    icon: Optional[str] = None      # theme icon name OR absolute path
    working_dir: Optional[str] = None
    terminal: bool = False
    hidden: bool = False            # NoDisplay=true or Hidden=true
    keywords: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return self.localized_name or self.name


@dataclass
class UsageRecord:
    weight: float = 0.0
    last_used: Optional[datetime] = None


class IconSizeType(str, enum.Enum):
    FIXED = "Fixed"
    SCALABLE = "Scalable"
    THRESHOLD = "Threshold"


@dataclass(frozen=True)
class ThemeDirectory:
    """One search node of an icon theme (a sized subdirectory on disk)."""
    path: Path
    size: int
    scale: int = 1
    type: IconSizeType = IconSizeType.THRESHOLD
    min_size: int = 0
    max_size: int = 0
    threshold: int = 2

    def matches(self, size: int) -> bool:
        """True if this directory holds icons meant for exactly `size` pixels."""
        if self.type == IconSizeType.FIXED:
            return self.size * self.scale == size
        if self.type == IconSizeType.SCALABLE:
            return self.min_size * self.scale <= size <= self.max_size * self.scale
        return (self.size - self.threshold) * self.scale <= size <= (self.size + self.threshold) * self.scale

    @property
    def effective_size(self) -> int:
        return self.size * self.scale


@dataclass(frozen=True)
class IconThemeEntry:
    name: str
    directories: Tuple[ThemeDirectory, ...] = ()
    parents: Tuple[str, ...] = ()


class IconFormat(str, enum.Enum):
    VECTOR = "vector"
    RASTER = "raster"
    CONTAINER = "container"


@dataclass(frozen=True)
class ResolvedIcon:
    reference: str
    path: Path
    format: IconFormat
    fallback: bool = False      # generic "unknown application" icon


@dataclass(frozen=True)
class IconBitmap:
    """A rasterized icon. The QImage is shared by every requester of the key."""
    source: Path
    size: int
    image: QImage = field(compare=False)
    cache_file: Optional[Path] = None


@dataclass(frozen=True)
class ScoredEntry:
    entry: AppEntry
    similarity: float
    score: float
    weight: float = 0.0


@dataclass(frozen=True)
class QueryResult:
    generation: int
    text: str
    entries: Tuple[ScoredEntry, ...] = ()


@dataclass(frozen=True)
class LaunchResult:
    identifier: str
    argv: Tuple[str, ...]
    pid: int
