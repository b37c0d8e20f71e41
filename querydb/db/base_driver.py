# =============================================================================
# File:        querydb/db/base_driver.py
# Purpose:     Jedinstven ugovor za izvršioce SQL naredbi (SQLite, ...)
# Created:     2025-08-07
# Updated:     2025-08-19
# =============================================================================
from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

Params = Union[Sequence[Any], Mapping[str, Any], None]


@dataclass
class StatementResult:
    """Rezultat jedne izvršene naredbe."""
    sql: str
    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0
    lastrowid: Optional[int] = None

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None

    def scalar(self):
        """Prva kolona prvog reda (kao fetchColumn)."""
        row = self.first()
        if not row:
            return None
        return next(iter(row.values()), None)


class BaseStatementExecutor(ABC):
    """
    Svi izvršioci moraju implementirati isti uski API:
    prepare + bind + execute, begin/commit/rollback i ping.
    Greške drajvera se prevode u DBConnectionError / PrepareError / ExecutionError.
    """

    # --- Lifecycle / konekcija ---
    @abstractmethod
    def connect(self) -> None:
        """Otvori konekciju (idempotentno)."""

    @abstractmethod
    def close(self) -> None:
        """Zatvori konekciju; sledeći execute() baca DBConnectionError."""

    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @abstractmethod
    def ping(self) -> bool:
        """True ako konekcija odgovara na trivijalan upit."""

    # --- Izvršavanje ---
    @abstractmethod
    def execute(self, sql: str, params: Params = None) -> StatementResult:
        """Pripremi, veži parametre (pozicione ili imenovane) i izvrši."""

    # --- Transakcije ---
    @abstractmethod
    def begin(self) -> None:
        ...

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...

    @contextmanager
    def transaction(self):
        """
        Context manager: commit na izlazu, rollback na izuzetak.
        Ugnježdeni pozivi idu preko savepoint-a (ako ih drajver podržava).
        """
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        else:
            self.commit()
