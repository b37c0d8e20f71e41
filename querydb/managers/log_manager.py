# ============================================================================
# File:       querydb/managers/log_manager.py
# Purpose:    LogManager klasa, klasni API sloj
# Created:    2025-08-07
# Updated:    2025-08-21
# ============================================================================

from collections import deque

from querydb.config.env import EnvLoader
from querydb.handlers.log_handler import LogHandler
from querydb.helpers.core_helper import safe_call


def _memory_limit(limit: int = None) -> int:
    # koliko poslednjih zapisa ostaje u memoriji; fajl log nema ograničenje
    if limit is None:
        limit = EnvLoader.get_int("LOG_MEMORY_LIMIT", 1000)
    return max(0, limit)


class LogManager:
    _log_entries = deque(maxlen=_memory_limit())

    @classmethod
    def initialize(cls, limit: int = None):
        cls._log_entries = deque(maxlen=_memory_limit(limit))

    @classmethod
    def create(cls, level: str, message: str):
        """
        Centralni ulaz za log. Pamti u memoriji i delegira LogHandler-u.
        Ako odgovarajuća metoda ne postoji na LogHandler-u, koristi _write fallback.
        """
        level_upper = (level or "").upper()
        level_lower = level_upper.lower()

        cls._log_entries.append((level_upper, message))

        method = getattr(LogHandler, level_lower, None)
        if callable(method):
            safe_call(method, message)
            return

        safe_call(LogHandler._write, level_upper, message)

    @classmethod
    def read(cls, last_only: bool = False, level: str = None):
        entries = list(cls._log_entries)
        if level:
            entries = [e for e in entries if e[0] == level.upper()]
        if last_only:
            return entries[-1] if entries else None
        return entries

    @classmethod
    def delete(cls, index: int = None):
        if index is None:
            cls._log_entries.clear()
        elif 0 <= index < len(cls._log_entries):
            del cls._log_entries[index]

    # === Shortcut metode ===

    @classmethod
    def debug(cls, message: str):
        cls.create("DEBUG", message)

    @classmethod
    def info(cls, message: str):
        cls.create("INFO", message)

    @classmethod
    def warning(cls, message: str):
        cls.create("WARNING", message)

    @classmethod
    def success(cls, message: str):
        cls.create("SUCCESS", message)

    @classmethod
    def error(cls, message: str):
        cls.create("ERROR", message)

    @classmethod
    def critical(cls, message: str):
        cls.create("CRITICAL", message)
