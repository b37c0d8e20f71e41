import os
import sys
import tempfile
from pathlib import Path
import pytest

# Omogući import projekta kad se testovi pokreću iz bilo kog radnog dir-a
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# log testova ne sme u projektni folder; mora pre importa LogHandler-a
os.environ.setdefault("LOG_FILE_PATH", str(Path(tempfile.gettempdir()) / "querydb_tests.log"))

from querydb.db.base_driver import BaseStatementExecutor, StatementResult
from querydb.db.query_builder import QueryBuilder
from querydb.db.sqlite_driver import SQLiteExecutor
from querydb.managers.error_manager import ErrorManager
from querydb.managers.log_manager import LogManager


class RecordingExecutor(BaseStatementExecutor):
    """
    Izvršilac bez baze: pamti (sql, params) i vraća unapred zadat rezultat.
    Ako je postavljen fail_with, execute() baca taj izuzetak.
    """

    def __init__(self, rows=None, rowcount=0, lastrowid=None):
        self.calls = []
        self.rows = rows or []
        self.rowcount = rowcount
        self.lastrowid = lastrowid
        self.fail_with = None
        self.connected = True
        self.tx_log = []

    def connect(self):
        self.connected = True

    def close(self):
        self.connected = False

    def is_connected(self):
        return self.connected

    def ping(self):
        return self.connected

    def execute(self, sql, params=None):
        self.calls.append((sql, params if isinstance(params, dict) else list(params or [])))
        if self.fail_with is not None:
            raise self.fail_with
        return StatementResult(sql=sql, rows=list(self.rows), rowcount=self.rowcount, lastrowid=self.lastrowid)

    def begin(self):
        self.tx_log.append("begin")

    def commit(self):
        self.tx_log.append("commit")

    def rollback(self):
        self.tx_log.append("rollback")

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture(autouse=True)
def clean_managers():
    LogManager.initialize()
    ErrorManager.initialize(dev_mode=False)
    yield


@pytest.fixture
def recorder():
    return RecordingExecutor()


@pytest.fixture
def rqb(recorder):
    return QueryBuilder(recorder)


@pytest.fixture
def executor():
    ex = SQLiteExecutor(path=":memory:")
    yield ex
    ex.close()


@pytest.fixture
def qb(executor):
    """QueryBuilder nad in-memory bazom sa tabelama users i orders."""
    executor.execute("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            login TEXT NOT NULL UNIQUE,
            firstName TEXT,
            age INTEGER,
            status TEXT,
            deleted_at TEXT
        )
    """)
    executor.execute("""
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id),
            amount INTEGER NOT NULL
        )
    """)
    users = [
        ("admin", "John", 40, "active", None),
        ("ana", "Ana", 30, "pending", None),
        ("boris", "Boris", 25, "blocked", None),
        ("ceca", "Ceca", 27, "active", "2025-01-01"),
    ]
    for u in users:
        executor.execute(
            "INSERT INTO users (login, firstName, age, status, deleted_at) VALUES (?, ?, ?, ?, ?)", u
        )
    for user_id, amount in [(1, 100), (1, 250), (2, 80), (4, 40)]:
        executor.execute("INSERT INTO orders (user_id, amount) VALUES (?, ?)", (user_id, amount))
    return QueryBuilder(executor)
