#===============================================================================
#  Launch Deck | scorer.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Fuzzy matching and ranking. Runs on every keystroke, so it only touches
#  in-memory structures: the Index's precomputed keys and a usage snapshot.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import math
from typing import List, Mapping, Optional

from rapidfuzz import fuzz
from rapidfuzz.distance import DamerauLevenshtein

from .constants import (
    NON_EXACT_CEILING,
    PENALIZED_CATEGORIES,
    PENALTY_FACTOR,
    SIMILARITY_FLOOR,
    USAGE_BOOST,
)
from .index import Index, SearchKeys
from .models import AppEntry, ScoredEntry
from .usage import UsageStore


def similarity(query: str, candidate: str) -> float:
    """Closeness of two lower-cased strings in [0, 1].

    Only exact equality scores 1.0. Dropped, extra and swapped characters
    lower the score gradually.
    """
    if not query or not candidate:
        return 0.0
    if query == candidate:
        return 1.0

    best = fuzz.WRatio(query, candidate) / 100.0
    best = max(best, DamerauLevenshtein.normalized_similarity(query, candidate))
    if candidate.startswith(query):
        best = max(best, 0.9 + 0.09 * len(query) / len(candidate))
    return min(best, NON_EXACT_CEILING)


def weight_factor(weight: float) -> float:
    """Sublinear usage boost: 1 + 0.1 * ln(1 + weight)."""
    return 1.0 + USAGE_BOOST * math.log1p(max(0.0, weight))


def is_penalized(entry: AppEntry) -> bool:
    if entry.terminal:
        return True
    return any(c in PENALIZED_CATEGORIES for c in entry.categories)


def entry_similarity(query: str, keys: SearchKeys, penalized: bool = False) -> float:
    best = 0.0
    for key in keys.primary:
        s = similarity(query, key)
        if s >= 1.0:
            return 1.0
        best = max(best, s)
    for key, weight in keys.secondary:
        best = max(best, similarity(query, key) * weight)
    if penalized:
        best *= PENALTY_FACTOR
    return best


def _rank_key(item: ScoredEntry):
    return (-item.score, -item.weight, item.entry.identifier)


def score(
    query: str,
    index: Index,
    usage: Optional[UsageStore] = None,
    floor: float = SIMILARITY_FLOOR,
    limit: Optional[int] = None,
    weights: Optional[Mapping[str, float]] = None,
) -> List[ScoredEntry]:
    """Rank visible entries for `query`, best first.

    An empty query orders every visible entry by usage weight. Otherwise
    entries below the similarity floor are left out.
    """
    if weights is None:
        weights = usage.snapshot() if usage is not None else {}
    q = (query or "").strip().lower()

    results: List[ScoredEntry] = []
    if not q:
        for entry in index.visible:
            w = weights.get(entry.identifier, 0.0)
            results.append(ScoredEntry(entry=entry, similarity=0.0, score=w, weight=w))
    else:
        for entry in index.visible:
            sim = entry_similarity(q, index.search_keys(entry.identifier), is_penalized(entry))
            if sim < floor:
                continue
            w = weights.get(entry.identifier, 0.0)
            results.append(ScoredEntry(entry=entry, similarity=sim, score=sim * weight_factor(w), weight=w))

    results.sort(key=_rank_key)
    if limit is not None:
        results = results[:limit]
    return results
