#===============================================================================
#  Launch Deck | rasterizer.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Turns a resolved icon file (SVG, PNG/XPM/..., ICO) into a square QImage
#  of the requested size and memoizes it in memory and as PNG files named
#  by the SHA-256 of (source path, size).
#
#  Notes
#  -----
#  - Identical concurrent requests share one render through a table of
#    pending futures.
#  - A broken icon is remembered and not retried in the same session.
#  - An unwritable cache folder only turns off persistence.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import hashlib
import logging
import os
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple

from PySide6.QtCore import QRectF, Qt
from PySide6.QtGui import QImage, QImageReader, QPainter
from PySide6.QtSvg import QSvgRenderer

from .errors import PersistenceError, RasterError
from .models import IconBitmap, IconFormat, ResolvedIcon

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, int]


def _blank(size: int) -> QImage:
    image = QImage(size, size, QImage.Format_ARGB32)
    image.fill(Qt.transparent)
    return image


def _fit_rect(width: float, height: float, size: int) -> QRectF:
    """Largest rect with the given aspect ratio centered in a size x size square."""
    if width <= 0 or height <= 0:
        return QRectF(0, 0, size, size)
    scale = size / max(width, height)
    w, h = width * scale, height * scale
    return QRectF((size - w) / 2.0, (size - h) / 2.0, w, h)


def fit_to_square(image: QImage, size: int) -> QImage:
    """Scale (keeping aspect) and center `image` on a transparent square."""
    image = image.convertToFormat(QImage.Format_ARGB32)
    if image.width() == size and image.height() == size:
        return image

    scaled = image.scaled(size, size, Qt.KeepAspectRatio, Qt.SmoothTransformation)
    canvas = _blank(size)
    painter = QPainter(canvas)
    painter.drawImage((size - scaled.width()) // 2, (size - scaled.height()) // 2, scaled)
    painter.end()
    return canvas


# ----------------------------
# Decoders, one per IconFormat
# ----------------------------
def render_vector(path: Path, size: int) -> QImage:
    """Render an SVG/SVGZ directly at the target resolution."""
    renderer = QSvgRenderer(str(path))
    if not renderer.isValid():
        raise RasterError(f"Invalid SVG: {path}")

    default = renderer.defaultSize()
    if default.isEmpty():
        box = renderer.viewBoxF()
        width, height = box.width(), box.height()
    else:
        width, height = default.width(), default.height()

    image = _blank(size)
    painter = QPainter(image)
    painter.setRenderHint(QPainter.Antialiasing)
    painter.setRenderHint(QPainter.SmoothPixmapTransform)
    renderer.render(painter, _fit_rect(width, height, size))
    painter.end()
    return image


def _read_container_images(path: Path) -> List[QImage]:
    probe = QImageReader(str(path), b"ico")
    count = max(1, probe.imageCount())
    images: List[QImage] = []
    for i in range(count):
        reader = QImageReader(str(path), b"ico")
        if i and not reader.jumpToImage(i):
            break
        image = reader.read()
        if not image.isNull():
            images.append(image)
    if not images:
        raise RasterError(f"Unreadable icon container {path}: {probe.errorString()}")
    return images


def pick_container_image(images: List[QImage], size: int) -> QImage:
    """Smallest embedded image not below `size`, else the largest one."""
    by_size = sorted(images, key=lambda img: max(img.width(), img.height()))
    for image in by_size:
        if max(image.width(), image.height()) >= size:
            return image
    return by_size[-1]


def render_container(path: Path, size: int) -> QImage:
    return fit_to_square(pick_container_image(_read_container_images(path), size), size)


def render_raster(path: Path, size: int) -> QImage:
    reader = QImageReader(str(path))
    image = reader.read()
    if image.isNull():
        raise RasterError(f"Unreadable image {path}: {reader.errorString()}")
    return fit_to_square(image, size)


DECODERS: Dict[IconFormat, Callable[[Path, int], QImage]] = {
    IconFormat.VECTOR: render_vector,
    IconFormat.RASTER: render_raster,
    IconFormat.CONTAINER: render_container,
}


def render_icon(resolved: ResolvedIcon, size: int) -> QImage:
    if size <= 0:
        raise RasterError(f"Invalid icon size {size}")
    return DECODERS[resolved.format](resolved.path, size)


# ----------------------------
# Cache
# ----------------------------
def cache_key(path: Path, size: int) -> CacheKey:
    return os.path.abspath(str(path)), int(size)


def cache_file_name(key: CacheKey) -> str:
    digest = hashlib.sha256(f"{key[0]}\n{key[1]}".encode("utf-8")).hexdigest()
    return f"{digest}.png"


class RasterCache:
    """Memoizes rasterized icons in memory and (best effort) on disk."""

    def __init__(self, cache_dir: Optional[Path] = None):
        self.cache_dir = cache_dir
        self._persist = cache_dir is not None
        self._lock = threading.Lock()
        self._memory: Dict[CacheKey, IconBitmap] = {}
        self._pending: Dict[CacheKey, Future] = {}
        self._failed: Set[CacheKey] = set()
        self.render_count = 0

    @property
    def persistent(self) -> bool:
        return self._persist

    def get(self, resolved: ResolvedIcon, size: int) -> Optional[IconBitmap]:
        """Memory-only lookup; never renders."""
        with self._lock:
            return self._memory.get(cache_key(resolved.path, size))

    def rasterize(self, resolved: ResolvedIcon, size: int) -> Optional[IconBitmap]:
        """Bitmap for `resolved` at `size`, or None if the icon cannot be decoded."""
        key = cache_key(resolved.path, size)
        with self._lock:
            hit = self._memory.get(key)
            if hit is not None:
                return hit
            if key in self._failed:
                return None
            future = self._pending.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._pending[key] = future

        if not owner:
            return future.result()

        bitmap: Optional[IconBitmap] = None
        try:
            bitmap = self._produce(resolved, size, key)
        except RasterError as e:
            logger.warning("Icon %s could not be rasterized: %s", resolved.path, e)
        except Exception:
            logger.exception("Unexpected failure rasterizing %s", resolved.path)
        finally:
            with self._lock:
                if bitmap is not None:
                    self._memory[key] = bitmap
                else:
                    self._failed.add(key)
                del self._pending[key]
            future.set_result(bitmap)
        return bitmap

    def _cache_file(self, key: CacheKey) -> Optional[Path]:
        if self.cache_dir is None:
            return None
        return self.cache_dir / cache_file_name(key)

    def _produce(self, resolved: ResolvedIcon, size: int, key: CacheKey) -> IconBitmap:
        cache_file = self._cache_file(key)
        if cache_file is not None:
            cached = self._load_cached(cache_file, resolved.path, size)
            if cached is not None:
                return IconBitmap(source=resolved.path, size=size, image=cached, cache_file=cache_file)

        image = render_icon(resolved, size)
        with self._lock:
            self.render_count += 1
        stored = self._store(image, cache_file)
        return IconBitmap(source=resolved.path, size=size, image=image, cache_file=stored)

    @staticmethod
    def _load_cached(cache_file: Path, source: Path, size: int) -> Optional[QImage]:
        try:
            if cache_file.stat().st_mtime_ns < source.stat().st_mtime_ns:
                return None
        except OSError:
            return None
        image = QImage(str(cache_file))
        if image.isNull() or image.width() != size or image.height() != size:
            return None
        return image.convertToFormat(QImage.Format_ARGB32)

    def _store(self, image: QImage, cache_file: Optional[Path]) -> Optional[Path]:
        with self._lock:
            if not self._persist or cache_file is None:
                return None
        tmp = cache_file.with_name(cache_file.name + ".tmp")
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            if not image.save(str(tmp), "PNG"):
                raise PersistenceError(f"Could not write {tmp}")
            os.replace(tmp, cache_file)
        except (OSError, PersistenceError) as e:
            logger.warning("Icon cache is memory-only for this session: %s", e)
            with self._lock:
                self._persist = False
            return None
        return cache_file
