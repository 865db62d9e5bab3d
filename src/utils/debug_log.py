"""
Debug Log Utility

Provides optional, safe file-based debug logging for volume loading and
navigation diagnostics. Logs are written only when enabled via environment
variable; write failures are swallowed so the viewer never crashes due to logging.

Inputs:
    - debug_log(location, message, data) calls from application code
    - Environment: MPRVIEWER_DEBUG_LOG (set to 1, true, or yes to enable)
    - Environment: MPRVIEWER_DEBUG_LOG_DIR (optional override of the log directory)

Outputs:
    - When enabled: appends JSON lines to <project_root>/.debug/debug.log
    - When disabled or on error: no side effects

Requirements:
    - Standard library only: pathlib, os, json, time
"""

import json
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

# This file is src/utils/debug_log.py -> parent=utils, parent.parent=src, parent.parent.parent=project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def is_debug_log_enabled() -> bool:
    """True when MPRVIEWER_DEBUG_LOG is set to 1, true, or yes (case-insensitive)."""
    return os.getenv("MPRVIEWER_DEBUG_LOG", "0").strip().lower() in ("1", "true", "yes")


def get_debug_log_path() -> Path:
    """Path of the debug log file, honoring MPRVIEWER_DEBUG_LOG_DIR."""
    log_dir = os.getenv("MPRVIEWER_DEBUG_LOG_DIR")
    if log_dir:
        return Path(log_dir) / "debug.log"
    return _PROJECT_ROOT / ".debug" / "debug.log"


def debug_log(location: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
    """
    Append one JSON log line to the debug log when debug logging is enabled.

    Failures (missing dir, permission, disk full, etc.) are caught and ignored
    so the application remains stable.

    Args:
        location: Call site identifier (e.g. "volume_assembler.py:assemble_volume").
        message: Short description of the event.
        data: Arbitrary dict of context (must be JSON-serializable).
    """
    if not is_debug_log_enabled():
        return
    try:
        log_path = get_debug_log_path()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "location": location,
            "message": message,
            "data": data or {},
            "timestamp": int(time.time() * 1000),
        }
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(payload) + "\n")
    except Exception:
        pass
