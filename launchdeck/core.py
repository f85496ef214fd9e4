#===============================================================================
#  Launch Deck | core.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-17
#
#  Summary
#  -------
#  LauncherCore: the API a UI talks to.
#    - rebuild_index()  -> background scan, delivered through poll()
#    - query(text)      -> ranked QueryResult tagged with a generation
#    - icon_for(entry)  -> cached bitmap now, or None while a job runs
#    - launch(entry)    -> spawn + usage bump, LaunchError on failure
#
#  Notes
#  -----
#  - All public methods are meant for the foreground thread. Workers only
#    talk back through the Channel, which poll() drains.
#  - Swapping the Index is a single reference assignment.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, wait
from typing import Dict, List, Optional, Sequence, Tuple

from .config import Settings
from .constants import ICON_WORKERS
from .icon_resolver import IconResolver
from .index import Index
from .launcher import launch_app
from .models import AppEntry, IconBitmap, LaunchResult, QueryResult
from .rasterizer import RasterCache
from .scorer import score
from .usage import UsageStore
from .workers import Channel, IconDispatcher, IconReady, IndexBuilder, IndexReady, Message

logger = logging.getLogger(__name__)

IconKey = Tuple[str, int]


class LauncherCore:
    def __init__(
        self,
        settings: Settings,
        usage: Optional[UsageStore] = None,
        resolver: Optional[IconResolver] = None,
        cache: Optional[RasterCache] = None,
        icon_workers: int = ICON_WORKERS,
    ):
        self.settings = settings
        self.usage = usage if usage is not None else UsageStore.load(settings.usage_path)
        self.cache = cache if cache is not None else RasterCache(settings.cache_dir)

        self._resolver = resolver
        self._resolver_lock = threading.Lock()

        self._channel = Channel()
        self._index = Index()
        self._index_rebuild = 0
        self._generation = 0
        self.no_applications = False

        self._icons: Dict[IconKey, Optional[IconBitmap]] = {}
        # key -> latest generation that asked for it
        self._inflight: Dict[IconKey, int] = {}
        self._icon_futures: List[Future] = []

        self._builder = IndexBuilder(self._channel)
        self._icon_jobs = IconDispatcher(self._channel, self.resolver, self.cache, icon_workers)

    # ----------------------------
    # Index
    # ----------------------------
    @property
    def index(self) -> Index:
        return self._index

    @property
    def generation(self) -> int:
        return self._generation

    def resolver(self) -> IconResolver:
        """Icon resolver, built on first use (reading theme manifests is I/O)."""
        with self._resolver_lock:
            if self._resolver is None:
                self._resolver = IconResolver(theme=self.settings.icon_theme)
            return self._resolver

    def rebuild_index(self) -> Future:
        """Scan descriptor folders in the background. The new Index lands on the next poll()."""
        logger.info("Rebuilding application index")
        return self._builder.submit(self.settings.application_dirs)

    def load_index(self, timeout: Optional[float] = None) -> Index:
        """Blocking rebuild for callers without an event loop."""
        self.rebuild_index().result(timeout=timeout)
        self.poll()
        return self._index

    def find(self, name: str) -> Tuple[AppEntry, ...]:
        return self._index.lookup_name(name)

    # ----------------------------
    # Channel
    # ----------------------------
    def poll(self) -> List[Message]:
        """Apply finished background work. Returns the messages that were applied."""
        applied: List[Message] = []
        for message in self._channel.drain():
            if isinstance(message, IndexReady):
                if self._apply_index(message):
                    applied.append(message)
            elif isinstance(message, IconReady):
                if self._apply_icon(message):
                    applied.append(message)
        return applied

    def _apply_index(self, message: IndexReady) -> bool:
        if message.rebuild_id < self._index_rebuild:
            return False
        self._index_rebuild = message.rebuild_id
        self._index = message.index
        self.no_applications = message.index.is_empty()
        if self.no_applications:
            logger.warning("No applications found in %s", ", ".join(str(d) for d in self.settings.application_dirs))
        else:
            logger.info("Index ready: %d entries (%d visible)", len(message.index), len(message.index.visible))
        return True

    def _apply_icon(self, message: IconReady) -> bool:
        key = (message.reference, message.size)
        requested = self._inflight.pop(key, message.generation)
        if requested != self._generation:
            logger.debug("Dropping stale icon %r (generation %d)", message.reference, requested)
            return False
        self._icons[key] = message.bitmap
        return True

    # ----------------------------
    # Collaborator API
    # ----------------------------
    def query(self, text: str, limit: Optional[int] = None) -> QueryResult:
        self._generation += 1
        entries = score(text, self._index, self.usage, limit=limit)
        return QueryResult(generation=self._generation, text=text, entries=tuple(entries))

    def is_current(self, result: QueryResult) -> bool:
        return result.generation == self._generation

    def icon_for(self, entry: AppEntry, size: Optional[int] = None) -> Optional[IconBitmap]:
        """Bitmap for `entry`, or None (placeholder) until the icon job reports back.

        An icon that could not be found or decoded stays None for the session.
        """
        size = size or self.settings.icon_size
        key = (entry.icon or "", size)
        if key in self._icons:
            return self._icons[key]
        running = key in self._inflight
        self._inflight[key] = self._generation
        if not running:
            self._icon_futures = [f for f in self._icon_futures if not f.done()]
            self._icon_futures.append(self._icon_jobs.submit(key[0], size, self._generation))
        return None

    def wait_for_icons(self, timeout: Optional[float] = None) -> None:
        """Block until the submitted icon jobs finish, then poll()."""
        wait(list(self._icon_futures), timeout=timeout)
        self.poll()

    def launch(self, entry: AppEntry, args: Sequence[str] = ()) -> LaunchResult:
        return launch_app(entry, self.usage, args, self.settings.terminal)

    def shutdown(self) -> None:
        self._builder.shutdown()
        self._icon_jobs.shutdown()
        self.usage.flush()

    def __enter__(self) -> "LauncherCore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
