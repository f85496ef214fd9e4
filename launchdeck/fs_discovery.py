#===============================================================================
#  Launch Deck | fs_discovery.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Filesystem discovery of .desktop descriptors. One bad file never aborts
#  a scan; it is logged and skipped.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import configparser
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .constants import DESKTOP_ENTRY_GROUP, DESKTOP_FILE_SUFFIX
from .errors import ParseError, ScanError
from .index import Index
from .models import AppEntry

logger = logging.getLogger(__name__)

_ESCAPES = {"s": " ", "n": "\n", "t": "\t", "r": "\r", "\\": "\\"}


def unescape_value(value: str) -> str:
    """Undo desktop-entry string escapes (\\s, \\n, \\t, \\r, \\\\)."""
    if "\\" not in value:
        return value
    out: List[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\" and i + 1 < len(value) and value[i + 1] in _ESCAPES:
            out.append(_ESCAPES[value[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _split_list(value: Optional[str]) -> tuple:
    if not value:
        return ()
    return tuple(v.strip() for v in value.split(";") if v.strip())


def _is_true(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def locale_variants(env: Optional[Mapping[str, str]] = None) -> List[str]:
    """Locale keys to try for Name[...], most specific first.

    LANG=de_AT.UTF-8@euro -> ["de_AT@euro", "de_AT", "de@euro", "de"]
    """
    env = os.environ if env is None else env
    raw = ""
    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        raw = (env.get(var) or "").strip()
        if raw:
            break
    if not raw or raw in ("C", "POSIX"):
        return []

    lang, _, modifier = raw.partition("@")
    lang = lang.split(".", 1)[0]
    language, _, country = lang.partition("_")

    variants: List[str] = []
    if country and modifier:
        variants.append(f"{language}_{country}@{modifier}")
    if country:
        variants.append(f"{language}_{country}")
    if modifier:
        variants.append(f"{language}@{modifier}")
    variants.append(language)
    return variants


def _new_parser() -> configparser.ConfigParser:
    cp = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        delimiters=("=",),
        comment_prefixes=("#",),
        inline_comment_prefixes=None,
        empty_lines_in_values=False,
    )
    cp.optionxform = str  # keys are case-sensitive
    return cp


def parse_desktop_file(path: Path, locales: Optional[List[str]] = None) -> Optional[AppEntry]:
    """Parse a single .desktop file.

    Returns None for descriptors that are not applications (Type=Link, ...).
    Raises ParseError for malformed files and for applications missing the
    mandatory Name or Exec keys.
    """
    try:
        text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"{path}: not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise ParseError(f"{path}: unreadable ({e})") from e

    cp = _new_parser()
    try:
        cp.read_string(text, source=str(path))
    except configparser.Error as e:
        raise ParseError(f"{path}: malformed descriptor ({e.__class__.__name__})") from e

    if not cp.has_section(DESKTOP_ENTRY_GROUP):
        raise ParseError(f"{path}: no [{DESKTOP_ENTRY_GROUP}] group")
    section = cp[DESKTOP_ENTRY_GROUP]

    kind = section.get("Type", "Application").strip()
    if kind != "Application":
        logger.debug("Skipping %s (Type=%s)", path, kind)
        return None

    def get(key: str) -> Optional[str]:
        value = section.get(key)
        if value is None:
            return None
        value = unescape_value(value.strip())
        return value or None

    name = get("Name")
    if not name:
        raise ParseError(f"{path}: missing Name")
    exec_cmd = get("Exec")
    if not exec_cmd:
        raise ParseError(f"{path}: missing Exec")

    localized = None
    for loc in (locale_variants() if locales is None else locales):
        localized = get(f"Name[{loc}]")
        if localized:
            break

    return AppEntry(
        identifier=path.name[: -len(DESKTOP_FILE_SUFFIX)] if path.name.endswith(DESKTOP_FILE_SUFFIX) else path.stem,
        name=name,
        exec=exec_cmd,
        path=str(path),
        localized_name=localized if localized != name else None,
        generic_name=get("GenericName"),
        comment=get("Comment"),
        icon=get("Icon"),
        working_dir=get("Path"),
        terminal=_is_true(section.get("Terminal")),
        hidden=_is_true(section.get("NoDisplay")) or _is_true(section.get("Hidden")),
        keywords=_split_list(get("Keywords")),
        categories=_split_list(get("Categories")),
    )


def iter_desktop_files(directory: Path) -> Iterator[Path]:
    """Yield *.desktop files directly inside `directory` (no recursion)."""
    if not directory.is_dir():
        logger.debug("Application folder %s does not exist", directory)
        return
    try:
        children = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ScanError(f"Could not list {directory}: {e}") from e

    for item in children:
        if item.suffix != DESKTOP_FILE_SUFFIX:
            continue
        # is_file() follows symlinks; dangling links are skipped
        if item.is_file():
            yield item


def scan(directories: Iterable[Path], locales: Optional[List[str]] = None) -> Index:
    """Scan descriptor folders and build a fresh Index.

    Earlier folders take precedence: the first readable descriptor with a
    given identifier wins, later ones are ignored.
    """
    found: Dict[str, AppEntry] = {}
    skipped = 0

    for directory in directories:
        directory = Path(directory)
        try:
            files = list(iter_desktop_files(directory))
        except ScanError as e:
            logger.warning("%s", e)
            continue

        for path in files:
            identifier = path.name[: -len(DESKTOP_FILE_SUFFIX)]
            if identifier in found:
                continue
            try:
                entry = parse_desktop_file(path, locales=locales)
            except ParseError as e:
                skipped += 1
                logger.warning("Skipping descriptor: %s", e)
                continue
            if entry is not None:
                found[identifier] = entry

    logger.info("Scanned %d applications (%d descriptors skipped)", len(found), skipped)
    return Index(found.values())
