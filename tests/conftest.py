import os
import struct
from pathlib import Path
from types import SimpleNamespace

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtGui import QColor, QGuiApplication, QImage  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One QGuiApplication for the whole session (SVG rendering needs it)."""
    app = QGuiApplication.instance() or QGuiApplication([])
    yield app


@pytest.fixture
def xdg_env(tmp_path, monkeypatch):
    """Points HOME and every XDG variable at a throwaway tree."""
    home = tmp_path / "home"
    data_home = home / ".local" / "share"
    config_home = home / ".config"
    cache_home = home / ".cache"
    system = tmp_path / "usr" / "share"
    for folder in (data_home, config_home, cache_home, system):
        folder.mkdir(parents=True)

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_home))
    monkeypatch.setenv("XDG_DATA_DIRS", str(system))
    monkeypatch.setenv("LANG", "C")
    for var in ("LC_ALL", "LC_MESSAGES", "LAUNCHDECK_ICON_THEME", "LAUNCHDECK_TERMINAL", "TERMINAL"):
        monkeypatch.delenv(var, raising=False)

    return SimpleNamespace(
        home=home,
        data_home=data_home,
        config_home=config_home,
        cache_home=cache_home,
        system=system,
        user_apps=data_home / "applications",
        system_apps=system / "applications",
    )


def desktop_text(**keys) -> str:
    lines = ["[Desktop Entry]"]
    keys.setdefault("Type", "Application")
    for key, value in keys.items():
        if value is None:
            continue
        lines.append(f"{key}={value}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def write_desktop():
    """write_desktop(folder, "org.example.App", Name="App", Exec="app") -> Path"""
    def _write(folder: Path, identifier: str, **keys) -> Path:
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / f"{identifier}.desktop"
        path.write_text(desktop_text(**keys), encoding="utf-8")
        return path

    return _write


# ----------------------------
# Icon files
# ----------------------------
def write_svg(path: Path, color: str = "#ff0000", width: int = 16, height: int = 16) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        f'<rect x="0" y="0" width="{width}" height="{height}" fill="{color}"/></svg>\n',
        encoding="utf-8",
    )
    return path


def write_png(path: Path, size: int = 32, color: str = "#00ff00") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    image = QImage(size, size, QImage.Format_ARGB32)
    image.fill(QColor(color))
    assert image.save(str(path), "PNG")
    return path


def _dib(size: int, bgra: bytes) -> bytes:
    header = struct.pack("<IiiHHIIiiII", 40, size, size * 2, 1, 32, 0, 0, 0, 0, 0, 0)
    pixels = bgra * (size * size)
    mask = b"\x00" * (((size + 31) // 32) * 4 * size)
    return header + pixels + mask


def write_ico(path: Path, images) -> Path:
    """images: [(size, (r, g, b)), ...] written as 32bpp DIB entries."""
    path.parent.mkdir(parents=True, exist_ok=True)
    blobs = [_dib(size, bytes((b, g, r, 255))) for size, (r, g, b) in images]
    out = struct.pack("<HHH", 0, 1, len(images))
    offset = 6 + 16 * len(images)
    for (size, _), blob in zip(images, blobs):
        dim = 0 if size >= 256 else size
        out += struct.pack("<BBBBHHII", dim, dim, 0, 0, 1, 32, len(blob), offset)
        offset += len(blob)
    path.write_bytes(out + b"".join(blobs))
    return path


@pytest.fixture
def make_theme():
    """make_theme(base, "hicolor", {"48x48/apps": {"Size": 48}}, inherits="") -> theme root"""
    def _make(base: Path, name: str, directories: dict, inherits: str = "") -> Path:
        root = base / name
        root.mkdir(parents=True, exist_ok=True)
        lines = ["[Icon Theme]", f"Name={name}", f"Directories={','.join(directories)}"]
        if inherits:
            lines.append(f"Inherits={inherits}")
        for subdir, keys in directories.items():
            (root / subdir).mkdir(parents=True, exist_ok=True)
            lines.append("")
            lines.append(f"[{subdir}]")
            for key, value in keys.items():
                lines.append(f"{key}={value}")
        (root / "index.theme").write_text("\n".join(lines) + "\n", encoding="utf-8")
        return root

    return _make


HICOLOR_DIRS = {
    "48x48/apps": {"Size": 48, "Type": "Threshold"},
    "32x32/apps": {"Size": 32, "Type": "Threshold"},
    "scalable/apps": {"Size": 128, "Type": "Scalable", "MinSize": 8, "MaxSize": 512},
}


@pytest.fixture
def hicolor(tmp_path, make_theme):
    """A minimal hicolor theme under tmp_path/icons."""
    base = tmp_path / "icons"
    root = make_theme(base, "hicolor", HICOLOR_DIRS)
    return SimpleNamespace(base=base, root=root)
