# ============================================================================
# File:       querydb/handlers/log_handler.py
# Purpose:    Pisanje logova na osnovu nivoa (DEBUG, INFO, ERROR, ...)
# Created:    2025-08-07
# Updated:    2025-08-19
# ============================================================================

import os
from datetime import datetime
from querydb.config.env import EnvLoader


class LogHandler:
    log_file_path = EnvLoader.get("LOG_FILE_PATH", "querydb/data/logs/querydb.log")

    @classmethod
    def set_path(cls, path: str):
        cls.log_file_path = path

    @staticmethod
    def _ensure_log_dir():
        try:
            os.makedirs(os.path.dirname(LogHandler.log_file_path) or ".", exist_ok=True)
        except OSError as e:
            print(f"❌ Ne mogu kreirati log direktorijum: {e}")

    @staticmethod
    def _write(level, message):
        try:
            LogHandler._ensure_log_dir()
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            log_entry = f"[{level.upper()}] {timestamp} - {message}\n"
            with open(LogHandler.log_file_path, "a", encoding="utf-8") as f:
                f.write(log_entry)
        except OSError as e:
            print(f"❌ Neuspelo logovanje: {e}")

    @staticmethod
    def debug(message):
        LogHandler._write("DEBUG", message)

    @staticmethod
    def info(message):
        LogHandler._write("INFO", message)

    @staticmethod
    def warning(message):
        LogHandler._write("WARNING", message)

    @staticmethod
    def success(message):
        LogHandler._write("SUCCESS", message)

    @staticmethod
    def error(message):
        LogHandler._write("ERROR", message)

    @staticmethod
    def critical(message):
        LogHandler._write("CRITICAL", message)
