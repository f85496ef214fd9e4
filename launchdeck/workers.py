#===============================================================================
#  Launch Deck | workers.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-17
#
#  Summary
#  -------
#  Background work: index rebuilds and icon jobs. Workers never share
#  mutable state with the foreground; they post immutable messages on a
#  Channel that the foreground drains at safe points.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import itertools
import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from .constants import ICON_WORKERS
from .fs_discovery import scan
from .icon_resolver import IconResolver
from .index import Index
from .models import IconBitmap, ResolvedIcon
from .rasterizer import RasterCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexReady:
    rebuild_id: int
    index: Index


@dataclass(frozen=True)
class IconReady:
    reference: str
    size: int
    generation: int
    resolved: Optional[ResolvedIcon]
    bitmap: Optional[IconBitmap]


Message = Union[IndexReady, IconReady]


class Channel:
    """Multi-producer queue drained by the foreground."""

    def __init__(self):
        self._queue: "queue.Queue[Message]" = queue.Queue()

    def put(self, message: Message) -> None:
        self._queue.put(message)

    def drain(self) -> List[Message]:
        out: List[Message] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except queue.Empty:
                return out


def _log_failure(future: Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error("Background job failed: %r", error)


class IndexBuilder:
    """Runs full scans on a single background thread."""

    def __init__(self, channel: Channel, scan_fn: Callable[[Sequence[Path]], Index] = scan):
        self._channel = channel
        self._scan = scan_fn
        self._ids = itertools.count(1)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="launchdeck-index")

    def submit(self, directories: Sequence[Path]) -> Future:
        rebuild_id = next(self._ids)
        directories = list(directories)

        def job() -> Index:
            index = self._scan(directories)
            self._channel.put(IndexReady(rebuild_id=rebuild_id, index=index))
            return index

        future = self._executor.submit(job)
        future.add_done_callback(_log_failure)
        return future

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)


class IconDispatcher:
    """Resolves and rasterizes icons on a worker pool."""

    def __init__(
        self,
        channel: Channel,
        resolver: Callable[[], IconResolver],
        cache: RasterCache,
        workers: int = ICON_WORKERS,
    ):
        self._channel = channel
        self._resolver = resolver
        self._cache = cache
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="launchdeck-icons")

    def submit(self, reference: str, size: int, generation: int) -> Future:
        def job() -> Optional[IconBitmap]:
            resolved = None
            bitmap = None
            try:
                resolved = self._resolver().resolve(reference, size)
                if resolved is not None:
                    bitmap = self._cache.rasterize(resolved, size)
            finally:
                # Always answer, so the foreground can clear its in-flight entry
                self._channel.put(
                    IconReady(reference=reference, size=size, generation=generation, resolved=resolved, bitmap=bitmap)
                )
            return bitmap

        future = self._executor.submit(job)
        future.add_done_callback(_log_failure)
        return future

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)
