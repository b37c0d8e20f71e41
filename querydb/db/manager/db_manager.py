# =============================================================================
# File:        querydb/db/manager/db_manager.py
# Purpose:     DBManager: jedan izvršilac + fabrika QueryBuilder-a po opsegu
# =============================================================================
from __future__ import annotations

from typing import Any, Dict, Optional

from querydb.db.base_driver import BaseStatementExecutor
from querydb.db.query_builder import QueryBuilder
from querydb.managers.error_manager import ErrorManager

from .config import DBConfig
from .helpers import _log


class DBManager:
    """
    Nema globalnog stanja: napravi jedan DBManager po opsegu (aplikacija,
    test, zahtev) i prosledi ga dalje. Svaki lanac upita dobija svoj
    QueryBuilder preko builder(); svi dele isti izvršilac.

    - from_env(), active_config(), get_driver_name(), shutdown()
    - open(), builder()
    - transaction()
    """

    def __init__(self, config: Optional[DBConfig] = None,
                 executor: Optional[BaseStatementExecutor] = None):
        self._config = config or DBConfig()
        self._executor = executor

    @classmethod
    def from_env(cls, reload_env: bool = False) -> "DBManager":
        return cls(DBConfig.from_env(reload_env=reload_env))

    # ---------- Lifecycle ----------
    def open(self) -> BaseStatementExecutor:
        if self._executor is None:
            try:
                self._executor = self._config.create_executor()
            except Exception as e:
                ErrorManager.create(e)
                raise
            _log("info", f"open -> driver={self._config.driver} source={self._config.source} "
                         f"params={self._config.params}")
        elif not self._executor.is_connected():
            self._executor.connect()
        return self._executor

    def shutdown(self) -> None:
        try:
            if self._executor is not None:
                self._executor.close()
                _log("info", f"shutdown -> driver={self._config.driver}")
        finally:
            self._executor = None

    def __enter__(self) -> "DBManager":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ---------- Builder / transakcije ----------
    def builder(self, prefix: Optional[str] = None) -> QueryBuilder:
        """Novi QueryBuilder (novo stanje) nad zajedničkim izvršiocem."""
        return QueryBuilder(
            self.open(),
            prefix=self._config.prefix if prefix is None else prefix,
            log_queries=self._config.log_queries,
        )

    def transaction(self):
        return self.open().transaction()

    # ---------- Pogled u stanje ----------
    def active_config(self) -> Dict[str, Any]:
        return self._config.as_dict()

    def get_driver_key(self) -> str:
        return self._config.driver

    def get_driver_name(self) -> Optional[str]:
        return self._executor.__class__.__name__ if self._executor else None

    def is_open(self) -> bool:
        return self._executor is not None and self._executor.is_connected()
