#===============================================================================
#  Launch Deck  |  Desktop Application Launcher Core
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Command line front end for the launcher core. Indexes the installed
#  applications (.desktop descriptors on the XDG search path), ranks them
#  against a typed query and optionally launches the best match.
#    - Fuzzy matching that tolerates typos and partial names
#    - Usage-weighted ranking (frequently launched apps float up)
#    - Icon resolution through the configured icon theme, rasterized and
#      cached on disk (--icons)
#
#  Usage
#  -----
#    python main.py fire              -> ranked matches for "fire"
#    python main.py fire --launch     -> launch the top match
#    python main.py --limit 20        -> most used applications
#
#  Copyright & License Notes
#  -------------------------
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#
#  This source code is provided "AS IS", without warranty of any kind, express
#  or implied, including but not limited to the warranties of merchantability,
#  fitness for a particular purpose, and noninfringement.
#
#  Third-Party Components
#  ----------------------
#  This project uses third-party libraries (PySide6, rapidfuzz) which are
#  licensed separately by their respective authors. Ensure compliance with
#  their license terms when distributing this software.
#===============================================================================

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from launchdeck.config import load_settings
from launchdeck.constants import APP_TITLE
from launchdeck.core import LauncherCore
from launchdeck.errors import LaunchError
from launchdeck.logging_setup import setup_logging

logger = logging.getLogger("launchdeck.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="launchdeck", description=APP_TITLE)
    parser.add_argument("query", nargs="?", default="", help="Approximate application name")
    parser.add_argument("--launch", action="store_true", help="Launch the best match")
    parser.add_argument("--limit", type=int, default=10, help="Maximum results to print (default: 10)")
    parser.add_argument("--icons", action="store_true", help="Resolve and cache icons for the results")
    parser.add_argument("--config", type=Path, default=None, help="Path to settings.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def _ensure_gui_app():
    """QSvgRenderer and font rendering need a QGuiApplication."""
    from PySide6.QtGui import QGuiApplication

    if not (os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY")):
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    return QGuiApplication.instance() or QGuiApplication(sys.argv[:1])


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    setup_logging("DEBUG" if args.verbose else settings.log_level, settings.log_file)

    gui_app = _ensure_gui_app() if args.icons else None

    with LauncherCore(settings) as core:
        core.load_index()
        if core.no_applications:
            print("No applications found.", file=sys.stderr)
            return 1

        result = core.query(args.query, limit=max(1, args.limit))
        if not result.entries:
            print(f"No match for {args.query!r}.", file=sys.stderr)
            return 1

        if args.icons:
            for item in result.entries:
                core.icon_for(item.entry)
            core.wait_for_icons()

        for rank, item in enumerate(result.entries, start=1):
            line = f"{rank:>3}. {item.entry.label:<40} {item.score:6.3f}  [{item.entry.identifier}]"
            if args.icons:
                bitmap = core.icon_for(item.entry)
                line += f"  {bitmap.cache_file or bitmap.source if bitmap else '-'}"
            print(line)

        if args.launch:
            top = result.entries[0].entry
            try:
                launched = core.launch(top)
            except LaunchError as e:
                logger.error("Launch of %s failed (%s): %s", top.identifier, e.kind.value, e)
                print(f"Launch failed: {e}", file=sys.stderr)
                return 1
            print(f"Launched {top.label} (pid {launched.pid})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
