#===============================================================================
#  Launch Deck | index.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-17
#
#  Summary
#  -------
#  In-memory application index. Immutable once built; a rescan builds a
#  new Index instead of patching the old one.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .constants import COMMENT_WEIGHT, GENERIC_NAME_WEIGHT, KEYWORD_WEIGHT
from .models import AppEntry


@dataclass(frozen=True)
class SearchKeys:
    """Lower-cased strings the scorer compares a query against."""
    primary: Tuple[str, ...]                    # name, localized name, id, id tail
    secondary: Tuple[Tuple[str, float], ...]    # (generic name, keyword or comment, weight)


def _search_keys(entry: AppEntry) -> SearchKeys:
    primary: List[str] = []
    for value in (entry.name, entry.localized_name, entry.identifier):
        if value and value.lower() not in primary:
            primary.append(value.lower())
    tail = entry.identifier.rsplit(".", 1)[-1].lower()
    if tail and tail not in primary:
        primary.append(tail)

    secondary: List[Tuple[str, float]] = []
    if entry.generic_name:
        secondary.append((entry.generic_name.lower(), GENERIC_NAME_WEIGHT))
    for keyword in entry.keywords:
        secondary.append((keyword.lower(), KEYWORD_WEIGHT))
    if entry.comment:
        secondary.append((entry.comment.lower(), COMMENT_WEIGHT))
    return SearchKeys(primary=tuple(primary), secondary=tuple(secondary))


class Index:
    """Collection of AppEntry keyed by identifier, with name lookups."""

    def __init__(self, entries: Iterable[AppEntry] = ()):
        by_id: Dict[str, AppEntry] = {}
        for entry in entries:
            if entry.identifier in by_id:
                raise ValueError(f"Duplicate identifier in index: {entry.identifier}")
            by_id[entry.identifier] = entry

        ordered = tuple(sorted(by_id.values(), key=lambda e: e.identifier))

        by_name: Dict[str, List[AppEntry]] = {}
        for entry in ordered:
            for name in {entry.name.lower(), (entry.localized_name or entry.name).lower()}:
                by_name.setdefault(name, []).append(entry)

        self._entries: Tuple[AppEntry, ...] = ordered
        self._visible: Tuple[AppEntry, ...] = tuple(e for e in ordered if not e.hidden)
        self._by_id: Mapping[str, AppEntry] = MappingProxyType(by_id)
        self._by_name: Mapping[str, Tuple[AppEntry, ...]] = MappingProxyType(
            {k: tuple(v) for k, v in by_name.items()}
        )
        self._keys: Mapping[str, SearchKeys] = MappingProxyType(
            {e.identifier: _search_keys(e) for e in self._visible}
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[AppEntry]:
        return iter(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._by_id

    @property
    def entries(self) -> Tuple[AppEntry, ...]:
        return self._entries

    @property
    def visible(self) -> Tuple[AppEntry, ...]:
        """Entries eligible for scoring (hidden ones are kept but excluded)."""
        return self._visible

    def get(self, identifier: str) -> Optional[AppEntry]:
        return self._by_id.get(identifier)

    def lookup_name(self, name: str) -> Tuple[AppEntry, ...]:
        """Entries whose (localized) display name equals `name`, case-insensitively."""
        return self._by_name.get(name.strip().lower(), ())

    def search_keys(self, identifier: str) -> SearchKeys:
        return self._keys[identifier]

    def is_empty(self) -> bool:
        return not self._entries
