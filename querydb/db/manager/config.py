# =============================================================================
# File:        querydb/db/manager/config.py
# Purpose:     DBConfig: .env -> konfiguracija -> izvršilac naredbi
# =============================================================================
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from querydb.config.env import EnvLoader
from querydb.db.base_driver import BaseStatementExecutor
from querydb.db.sqlite_driver import SQLiteExecutor

# driver_key -> klasa izvršioca
DRIVERS: Dict[str, Callable[..., BaseStatementExecutor]] = {
    "sqlite": SQLiteExecutor,
}


@dataclass
class DBConfig:
    driver: str = "sqlite"
    params: Dict[str, Any] = field(default_factory=dict)
    prefix: str = ""
    log_queries: bool = False
    source: str = "code"  # "env" | "code"

    def __post_init__(self):
        self.driver = (self.driver or "sqlite").strip().lower()
        if self.driver not in DRIVERS:
            raise ValueError(f"Nepoznat DB_DRIVER: {self.driver}")
        self.params = dict(self.params or {})
        self.prefix = self.prefix or ""

    @classmethod
    def from_env(cls, reload_env: bool = False) -> "DBConfig":
        """
        Čita:
          - DB_DRIVER (default sqlite)
          - SQLITE_PATH ili DB_PATH/app.db
          - DB_PREFIX (prefiks za sva imena tabela, default prazan)
          - DB_LOG_QUERIES (loguje svaki SQL na DEBUG nivou)
        """
        EnvLoader.load(force=reload_env)

        driver_key = (EnvLoader.get("DB_DRIVER", "sqlite") or "sqlite").strip().lower()
        db_path = (EnvLoader.get("DB_PATH", "querydb/data/db/") or "querydb/data/db/").strip()

        params: Dict[str, Any] = {}
        if driver_key == "sqlite":
            params["path"] = EnvLoader.get("SQLITE_PATH", None) or f"{db_path.rstrip('/')}/app.db"

        return cls(
            driver=driver_key,
            params=params,
            prefix=EnvLoader.get("DB_PREFIX", "") or "",
            log_queries=EnvLoader.get_bool("DB_LOG_QUERIES", False),
            source="env",
        )

    def create_executor(self) -> BaseStatementExecutor:
        return DRIVERS[self.driver](**self.params)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "driver": self.driver,
            "params": dict(self.params),
            "prefix": self.prefix,
            "log_queries": self.log_queries,
            "source": self.source,
        }
