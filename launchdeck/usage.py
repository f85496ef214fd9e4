#===============================================================================
#  Launch Deck | usage.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Usage Store: identifier -> (weight, last used). Load/save of usage.json
#  and the only place where usage weights change.
#
#  Weight curve
#  ------------
#  On every launch the stored weight first decays with a 30 day half-life
#  and then grows by one:  w = w * 0.5 ** (days_since_last_use / 30) + 1
#  Ranking applies ln(1 + w) on top (see scorer.weight_factor).
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .constants import USAGE_HALF_LIFE_DAYS, USAGE_RETENTION_DAYS
from .errors import PersistenceError
from .models import UsageRecord

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
SECONDS_PER_DAY = 86400.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_usage() -> Dict[str, Any]:
    return {
        "version": FORMAT_VERSION,
        "records": {},  # identifier -> {"weight": float, "last_used": iso8601}
    }


def decayed_weight(weight: float, last_used: Optional[datetime], now: datetime,
                   half_life_days: float = USAGE_HALF_LIFE_DAYS) -> float:
    if last_used is None or half_life_days <= 0:
        return weight
    days = max(0.0, (now - last_used).total_seconds() / SECONDS_PER_DAY)
    return weight * 0.5 ** (days / half_life_days)


class UsageStore:
    """Single owner of usage weights. All mutations are serialized by one lock."""

    def __init__(
        self,
        path: Optional[Path] = None,
        clock: Callable[[], datetime] = _utcnow,
        half_life_days: float = USAGE_HALF_LIFE_DAYS,
        retention_days: float = USAGE_RETENTION_DAYS,
    ):
        self.path = path
        self._clock = clock
        self._half_life_days = half_life_days
        self._retention_days = retention_days
        self._lock = threading.Lock()
        self._records: Dict[str, UsageRecord] = {}
        self._persistent = path is not None

    # ----------------------------
    # Load / save
    # ----------------------------
    @classmethod
    def load(cls, path: Path, **kwargs) -> "UsageStore":
        """Load usage from disk. Missing or corrupt files give an empty store."""
        store = cls(path, **kwargs)
        if not path.exists():
            return store
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            records = data.get("records", {}) if isinstance(data, dict) else {}
            for identifier, raw in records.items():
                record = _record_from_json(raw)
                if record is not None:
                    store._records[str(identifier)] = record
        except Exception as e:
            logger.warning("Usage file %s is unreadable, starting empty: %s", path, e)
            store._records.clear()
            return store

        purged = store.prune()
        if purged:
            logger.info("Purged %d stale usage records.", purged)
        return store

    def flush(self) -> bool:
        """Persist to disk. Failures degrade the store to session-only state."""
        with self._lock:
            return self._flush_locked()

    def _flush_locked(self) -> bool:
        if not self._persistent or self.path is None:
            return False
        payload = default_usage()
        payload["records"] = {k: _record_to_json(v) for k, v in sorted(self._records.items())}
        try:
            _atomic_write(self.path, json.dumps(payload, indent=2))
        except PersistenceError as e:
            logger.warning("%s; usage is kept for this session only.", e)
            self._persistent = False
            return False
        return True

    @property
    def persistent(self) -> bool:
        return self._persistent

    # ----------------------------
    # Queries
    # ----------------------------
    def weight(self, identifier: str) -> float:
        with self._lock:
            record = self._records.get(identifier)
            return record.weight if record else 0.0

    def get(self, identifier: str) -> Optional[UsageRecord]:
        with self._lock:
            record = self._records.get(identifier)
            return UsageRecord(record.weight, record.last_used) if record else None

    def snapshot(self) -> Dict[str, float]:
        """Copy of all weights; lets the scorer read usage without locking per entry."""
        with self._lock:
            return {k: r.weight for k, r in self._records.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ----------------------------
    # Mutations
    # ----------------------------
    def record_launch(self, identifier: str, flush: bool = True) -> UsageRecord:
        """Bump the usage weight of `identifier` after a successful launch."""
        with self._lock:
            now = self._clock()
            record = self._records.get(identifier)
            if record is None:
                record = UsageRecord()
                self._records[identifier] = record
            record.weight = decayed_weight(record.weight, record.last_used, now, self._half_life_days) + 1.0
            record.last_used = now
            result = UsageRecord(record.weight, record.last_used)
            if flush:
                self._flush_locked()
        return result

    def prune(self) -> int:
        """Drop records not used within the retention window."""
        with self._lock:
            now = self._clock()
            stale = [
                k for k, r in self._records.items()
                if r.last_used is not None
                and (now - r.last_used).total_seconds() > self._retention_days * SECONDS_PER_DAY
            ]
            for k in stale:
                del self._records[k]
            return len(stale)


def _record_from_json(raw: Any) -> Optional[UsageRecord]:
    if not isinstance(raw, dict):
        return None
    try:
        weight = float(raw.get("weight", 0.0))
    except (TypeError, ValueError):
        return None
    if weight < 0:
        weight = 0.0
    last_used = None
    stamp = raw.get("last_used")
    if stamp:
        try:
            last_used = datetime.fromisoformat(stamp)
        except (TypeError, ValueError):
            last_used = None
        if last_used is not None and last_used.tzinfo is None:
            last_used = last_used.replace(tzinfo=timezone.utc)
    return UsageRecord(weight=weight, last_used=last_used)


def _record_to_json(record: UsageRecord) -> Dict[str, Any]:
    return {
        "weight": round(record.weight, 6),
        "last_used": record.last_used.isoformat() if record.last_used else None,
    }


def _atomic_write(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".usage-", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, path)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
    except OSError as e:
        raise PersistenceError(f"Could not write {path}: {e}") from e
