"""
debug_trace.py

Event tracing for the canvas, the adapters and geocoding.

Off unless STRATA_DEBUG_TRACE is set. STRATA_TRACE_CATEGORIES narrows the
output to a comma separated list of categories (e.g. "MAP,POPUP"); CRASH
and ERROR lines are always written. Lines go to stderr and to a log file in
the platform log directory.
"""

import os
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional, Set

import platformdirs

DEBUG_TRACE = os.environ.get("STRATA_DEBUG_TRACE", "") not in ("", "0")

_ALWAYS = {"CRASH", "ERROR"}


def _parse_categories(value: str) -> Optional[Set[str]]:
    names = {part.strip().upper() for part in value.split(",") if part.strip()}
    return names or None


# None traces every category
TRACE_CATEGORIES = _parse_categories(os.environ.get("STRATA_TRACE_CATEGORIES", ""))

LOG_FILE = Path(platformdirs.user_log_dir("strata-canvas")) / "strata_canvas_debug.log"

_log_file = None


def _get_log_file():
    global _log_file
    if LOG_FILE and _log_file is None:
        try:
            LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            _log_file = open(LOG_FILE, "w", encoding="utf-8")
        except OSError:
            return None
    return _log_file


def enabled(category: str) -> bool:
    if not DEBUG_TRACE:
        return False
    if category in _ALWAYS or TRACE_CATEGORIES is None:
        return True
    return category in TRACE_CATEGORIES


def trace(msg: str, category: str = "INFO"):
    """Write a timestamped trace line for ``category``."""
    if not enabled(category):
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] [{category}] {msg}"
    print(line, file=sys.stderr, flush=True)

    log_file = _get_log_file()
    if log_file:
        try:
            log_file.write(line + "\n")
            log_file.flush()
        except OSError:
            pass


def trace_exception(msg: str = "Exception"):
    """Trace the exception currently being handled."""
    trace(f"{msg}: {traceback.format_exc()}", "ERROR")


def close_log():
    global _log_file
    if _log_file:
        try:
            _log_file.close()
        except OSError:
            pass
        _log_file = None
