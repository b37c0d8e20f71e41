# ========================================================================
# File:       querydb/managers/error_manager.py
# Purpose:    Registar grešaka (sigurno logovanje)
# Created:    2025-08-07
# Updated:    2025-08-21
# ========================================================================

from collections import deque

from querydb.config.env import EnvLoader
from querydb.handlers.error_handler import ErrorHandler
from querydb.managers.log_manager import LogManager
from querydb.helpers.core_helper import safe_call


class ErrorManager:
    # izuzeci drže traceback i frame-ove, pa se pamti samo poslednjih N
    _errors = deque(maxlen=max(0, EnvLoader.get_int("ERROR_MEMORY_LIMIT", 100)))
    _dev_mode = EnvLoader.get_bool("APP_DEBUG", False)

    @classmethod
    def initialize(cls, dev_mode: bool = None, limit: int = None):
        if limit is None:
            limit = EnvLoader.get_int("ERROR_MEMORY_LIMIT", 100)
        cls._errors = deque(maxlen=max(0, limit))
        cls._dev_mode = EnvLoader.get_bool("APP_DEBUG", False) if dev_mode is None else dev_mode

    @classmethod
    def create(cls, error: Exception, context: str = None):
        cls._errors.append(error)
        formatted = ErrorHandler.format_error(error)
        if context:
            formatted = f"{formatted} | {context}"

        ErrorHandler.display(error, dev_mode=cls._dev_mode)

        safe_call(LogManager.create, "error", formatted)

    @classmethod
    def read(cls, last_only: bool = True):
        if last_only:
            return cls._errors[-1] if cls._errors else None
        return list(cls._errors)

    @classmethod
    def delete(cls, index: int = None):
        if index is None:
            cls._errors.clear()
        elif 0 <= index < len(cls._errors):
            del cls._errors[index]
