# =============================================================================
# File:        querydb/db/sqlite_driver.py
# Purpose:     SQLite izvršilac naredbi:
#              - PRAGMA tuning iz .env (WAL, synchronous, busy_timeout)
#              - ugnježdene transakcije preko savepoint-a
#              - FIELD() funkcija za ORDER BY po eksplicitnoj listi vrednosti
#              - mapiranje sqlite3 grešaka na DB izuzetke
# Created:     2025-08-07
# Updated:     2025-08-21
# =============================================================================
from __future__ import annotations

import os
import sqlite3
from typing import Any, Dict, List, Optional

from querydb.config.env import EnvLoader
from querydb.db.base_driver import BaseStatementExecutor, Params, StatementResult
from querydb.db.query import DBConnectionError, ExecutionError, PrepareError

MEMORY = ":memory:"

# poruke sqlite3.OperationalError koje znače da naredba nije ni pripremljena
_PREPARE_MARKERS = ("syntax error", "near ", "no such table", "no such column",
                    "no such function", "incomplete input", "unrecognized token")


def _field(value, *candidates):
    """MySQL FIELD(): 1-bazirana pozicija vrednosti u listi, 0 ako je nema."""
    for i, c in enumerate(candidates, start=1):
        if value is not None and str(value) == str(c):
            return i
    return 0


def _translate(error: sqlite3.Error) -> Exception:
    msg = str(error)
    if isinstance(error, sqlite3.ProgrammingError):
        # npr. "Incorrect number of bindings supplied"
        if "closed" in msg.lower():
            return DBConnectionError(msg)
        return PrepareError(msg)
    if isinstance(error, sqlite3.OperationalError):
        low = msg.lower()
        if any(m in low for m in _PREPARE_MARKERS):
            return PrepareError(msg)
        if "unable to open" in low:
            return DBConnectionError(msg)
    return ExecutionError(msg)


class SQLiteExecutor(BaseStatementExecutor):
    """
    Params:
      - path: putanja do .db fajla ili ':memory:'
      - timeout: sekunde čekanja na lock (default 5.0)
      - autoconnect: odmah otvori konekciju (default True)
    """

    def __init__(self, **params):
        db_path = params.get("path") or os.path.join("querydb", "data", "db", "app.db")
        self.timeout = float(params.get("timeout", 5.0))

        if db_path == MEMORY:
            self.db_file = MEMORY
        else:
            self.db_file = os.path.abspath(db_path)
            if os.path.isdir(self.db_file):
                raise DBConnectionError(
                    f"SQLite path '{self.db_file}' je direktorijum, očekivan je put do .db fajla."
                )

        self.conn: Optional[sqlite3.Connection] = None
        self._tx_depth = 0  # za savepoint-e

        if params.get("autoconnect", True):
            self.connect()

    # --- lifecycle ---
    def connect(self) -> None:
        if self.conn is not None:
            return
        try:
            if self.db_file != MEMORY:
                os.makedirs(os.path.dirname(self.db_file) or ".", exist_ok=True)
            # isolation_level=None -> ručno BEGIN/COMMIT
            conn = sqlite3.connect(self.db_file, isolation_level=None, timeout=self.timeout)
        except (sqlite3.Error, OSError) as e:
            raise DBConnectionError(f"Ne mogu otvoriti SQLite bazu '{self.db_file}': {e}") from e
        conn.row_factory = sqlite3.Row
        conn.create_function("FIELD", -1, _field)
        self.conn = conn
        self._tx_depth = 0
        self._apply_pragmas()

    def close(self) -> None:
        if self.conn is None:
            return
        try:
            self.conn.close()
        finally:
            self.conn = None
            self._tx_depth = 0

    def is_connected(self) -> bool:
        return self.conn is not None

    def ping(self) -> bool:
        if self.conn is None:
            return False
        try:
            self.conn.execute("SELECT 1;").fetchone()
        except sqlite3.Error:
            return False
        return True

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise DBConnectionError("SQLite konekcija nije otvorena (pozovi connect())")
        return self.conn

    # --- PRAGMA podešavanja (tunable preko .env) ---
    def _apply_pragmas(self) -> None:
        """
        Podržane .env varijable (sve opcione):
          - SQLITE_JOURNAL_MODE=wal|delete|truncate|persist|off|memory
          - SQLITE_WAL=true|false  (ako je JOURNAL_MODE izostavljen)
          - SQLITE_SYNCHRONOUS=OFF|NORMAL|FULL|EXTRA
          - SQLITE_BUSY_TIMEOUT_MS=4000
        """
        cur = self.conn.cursor()
        try:
            cur.execute("PRAGMA foreign_keys = ON;")

            jm = EnvLoader.get("SQLITE_JOURNAL_MODE", None)
            if jm:
                jm = str(jm).strip().lower()
                if jm in ("wal", "delete", "truncate", "persist", "off", "memory"):
                    cur.execute(f"PRAGMA journal_mode = {jm};")
            elif self.db_file != MEMORY and EnvLoader.get_bool("SQLITE_WAL", True):
                cur.execute("PRAGMA journal_mode = wal;")

            sync = (EnvLoader.get("SQLITE_SYNCHRONOUS", "NORMAL") or "NORMAL").upper()
            if sync not in ("OFF", "NORMAL", "FULL", "EXTRA"):
                sync = "NORMAL"
            cur.execute(f"PRAGMA synchronous = {sync};")

            bt = EnvLoader.get_int("SQLITE_BUSY_TIMEOUT_MS", 4000)
            cur.execute(f"PRAGMA busy_timeout = {bt};")
        finally:
            cur.close()

    # --- izvršavanje ---
    def execute(self, sql: str, params: Params = None) -> StatementResult:
        conn = self._require_conn()
        if params is None:
            params = ()
        elif not isinstance(params, dict):
            params = tuple(params)

        cur = conn.cursor()
        try:
            cur.execute(sql, params)
            rows: List[Dict[str, Any]] = []
            if cur.description is not None:
                rows = [{k: row[k] for k in row.keys()} for row in cur.fetchall()]
            rowcount = cur.rowcount if cur.rowcount is not None and cur.rowcount >= 0 else len(rows)
            return StatementResult(sql=sql, rows=rows, rowcount=rowcount, lastrowid=cur.lastrowid)
        except sqlite3.Error as e:
            raise _translate(e) from e
        finally:
            cur.close()

    # --- transakcije (sa savepointima) ---
    def begin(self) -> None:
        conn = self._require_conn()
        try:
            if self._tx_depth == 0:
                conn.execute("BEGIN;")
            else:
                conn.execute(f"SAVEPOINT sp_{self._tx_depth + 1};")
        except sqlite3.Error as e:
            raise _translate(e) from e
        self._tx_depth += 1

    def commit(self) -> None:
        conn = self._require_conn()
        if self._tx_depth == 0:
            return
        # dubina se spušta tek kad naredba prođe; neuspeo COMMIT ostavlja transakciju otvorenom
        depth = self._tx_depth
        try:
            if depth == 1:
                conn.execute("COMMIT;")
            else:
                conn.execute(f"RELEASE SAVEPOINT sp_{depth};")
        except sqlite3.Error as e:
            raise _translate(e) from e
        self._tx_depth = depth - 1

    def rollback(self) -> None:
        conn = self._require_conn()
        if self._tx_depth == 0:
            return
        depth = self._tx_depth
        try:
            if depth == 1:
                conn.execute("ROLLBACK;")
            else:
                # ROLLBACK TO ostavlja savepoint otvoren, pa ga i otpuštamo
                conn.execute(f"ROLLBACK TO SAVEPOINT sp_{depth};")
                conn.execute(f"RELEASE SAVEPOINT sp_{depth};")
        except sqlite3.Error as e:
            raise _translate(e) from e
        self._tx_depth = depth - 1

    def in_transaction(self) -> bool:
        return self._tx_depth > 0
