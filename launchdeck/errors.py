#===============================================================================
#  Launch Deck | errors.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-16
#  Last Update : 2026-10-16
#
#  Summary
#  -------
#  Error taxonomy of the launcher core. Only LaunchError is meant to reach
#  the UI; everything else is logged and recovered where it happens.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import enum
from typing import Optional


class LauncherError(Exception):
    """Base class for launcher core errors."""


class ScanError(LauncherError):
    """A descriptor directory or file could not be read."""


class ParseError(LauncherError):
    """A descriptor file is malformed or lacks mandatory keys."""


class RasterError(LauncherError):
    """An icon file is corrupt or in an unsupported format."""


class PersistenceError(LauncherError):
    """Usage or icon cache data could not be written."""


class LaunchFailure(str, enum.Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    NO_TERMINAL = "no_terminal"
    BAD_COMMAND = "bad_command"
    SPAWN_FAILED = "spawn_failed"


class LaunchError(LauncherError):
    def __init__(self, kind: LaunchFailure, message: str, identifier: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.identifier = identifier
