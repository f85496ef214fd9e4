#===============================================================================
#  Launch Deck | launcher.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Launches desktop entries: Exec= field-code expansion, optional terminal
#  wrapping, detached spawn. Usage weight is only bumped after a spawn
#  succeeded.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import os
import re
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from .constants import TERMINAL_CANDIDATES
from .errors import LaunchError, LaunchFailure
from .models import AppEntry, LaunchResult
from .usage import UsageStore

logger = logging.getLogger(__name__)

_INLINE_CODE = re.compile(r"%(.)")


def _expand_inline(token: str, entry: AppEntry) -> str:
    def repl(m: "re.Match[str]") -> str:
        code = m.group(1)
        if code == "%":
            return "%"
        if code == "c":
            return entry.label
        if code == "k":
            return entry.path
        # file/url codes and deprecated codes have no inline meaning
        return ""

    return _INLINE_CODE.sub(repl, token)


def expand_exec(entry: AppEntry, args: Sequence[str] = ()) -> List[str]:
    """Expand the Exec= template of `entry` into an argv list.

    %f/%u take the first of `args`, %F/%U take all of them; without args
    they are dropped. %i becomes "--icon <Icon>", %c the name, %k the
    descriptor path.
    """
    try:
        tokens = shlex.split(entry.exec)
    except ValueError as e:
        raise LaunchError(LaunchFailure.BAD_COMMAND, f"Unparsable Exec for {entry.name}: {e}", entry.identifier) from e

    argv: List[str] = []
    for token in tokens:
        if token in ("%f", "%u"):
            if args:
                argv.append(args[0])
        elif token in ("%F", "%U"):
            argv.extend(args)
        elif token == "%i":
            if entry.icon:
                argv.extend(["--icon", entry.icon])
        elif token == "%c":
            argv.append(entry.label)
        elif token == "%k":
            if entry.path:
                argv.append(entry.path)
        else:
            expanded = _expand_inline(token, entry)
            if expanded or "%" not in token:
                argv.append(expanded)

    if not argv:
        raise LaunchError(LaunchFailure.BAD_COMMAND, f"Empty command for {entry.name}", entry.identifier)
    return argv


def find_terminal(preferred: str = "") -> Optional[List[str]]:
    """Terminal emulator command prefix, e.g. ["xterm", "-e"]."""
    candidates = [c for c in (preferred, os.environ.get("TERMINAL", "")) if c.strip()]
    candidates += list(TERMINAL_CANDIDATES)
    for candidate in candidates:
        try:
            parts = shlex.split(candidate)
        except ValueError:
            continue
        if parts and shutil.which(parts[0]):
            return parts + ["-e"]
    return None


def check_executable(program: str, entry: AppEntry) -> None:
    """Fail early with a precise kind when the program is missing or not runnable."""
    if os.sep in program:
        path = Path(program)
        if not path.exists():
            raise LaunchError(LaunchFailure.NOT_FOUND, f"{program} does not exist", entry.identifier)
        if path.is_dir() or not os.access(program, os.X_OK):
            raise LaunchError(LaunchFailure.PERMISSION_DENIED, f"{program} is not executable", entry.identifier)
        return
    if shutil.which(program) is None:
        raise LaunchError(LaunchFailure.NOT_FOUND, f"{program} not found on PATH", entry.identifier)


def build_command(entry: AppEntry, args: Sequence[str] = (), terminal: str = "") -> List[str]:
    argv = expand_exec(entry, args)
    check_executable(argv[0], entry)
    if entry.terminal:
        prefix = find_terminal(terminal)
        if prefix is None:
            raise LaunchError(LaunchFailure.NO_TERMINAL, f"{entry.name} needs a terminal but none was found", entry.identifier)
        argv = prefix + argv
    return argv


def _working_dir(entry: AppEntry) -> Optional[str]:
    if not entry.working_dir:
        return None
    folder = Path(os.path.expanduser(entry.working_dir))
    if folder.is_dir():
        return str(folder)
    logger.warning("Working directory %s of %s is missing; using the current one.", folder, entry.identifier)
    return None


def spawn_detached(argv: Sequence[str], cwd: Optional[str] = None) -> subprocess.Popen:
    """Start a process that outlives the launcher."""
    kwargs = dict(
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        close_fds=True,
    )
    if os.name == "nt":
        kwargs["creationflags"] = (
            getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)
        )
    else:
        kwargs["start_new_session"] = True
    return subprocess.Popen(list(argv), **kwargs)


def launch_app(
    entry: AppEntry,
    usage: Optional[UsageStore] = None,
    args: Sequence[str] = (),
    terminal: str = "",
) -> LaunchResult:
    """Launch an app entry and record the use.

    Raises LaunchError (usage untouched) when the command cannot be spawned.
    """
    argv = build_command(entry, args, terminal)
    try:
        proc = spawn_detached(argv, _working_dir(entry))
    except FileNotFoundError as e:
        raise LaunchError(LaunchFailure.NOT_FOUND, f"{argv[0]}: {e.strerror}", entry.identifier) from e
    except PermissionError as e:
        raise LaunchError(LaunchFailure.PERMISSION_DENIED, f"{argv[0]}: {e.strerror}", entry.identifier) from e
    except OSError as e:
        raise LaunchError(LaunchFailure.SPAWN_FAILED, f"{argv[0]}: {e}", entry.identifier) from e

    logger.info("Launched %s (pid %d): %s", entry.identifier, proc.pid, " ".join(argv))
    if usage is not None:
        usage.record_launch(entry.identifier)
    return LaunchResult(identifier=entry.identifier, argv=tuple(argv), pid=proc.pid)
