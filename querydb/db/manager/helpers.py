# =============================================================================
# File:        querydb/db/manager/helpers.py
# Purpose:     Zajednički helper-i za DBManager podmodule
# Updated:     2025-08-19
# =============================================================================
from __future__ import annotations

from querydb.managers.log_manager import LogManager


def _log(level: str, msg: str):
    method = getattr(LogManager, level, None)
    if callable(method):
        method(f"[DBManager] {msg}")
    else:
        LogManager.create(level, f"[DBManager] {msg}")
