import pytest

from querydb.config.env import EnvLoader
from querydb.db.manager.config import DBConfig
from querydb.db.manager.db_manager import DBManager
from querydb.db.query_builder import QueryBuilder


@pytest.fixture
def env_sqlite(monkeypatch, tmp_path):
    path = tmp_path / "app_test.db"
    monkeypatch.setenv("DB_DRIVER", "sqlite")
    monkeypatch.setenv("SQLITE_PATH", str(path))
    monkeypatch.setenv("DB_PREFIX", "tst_")
    monkeypatch.setenv("DB_LOG_QUERIES", "true")
    return path


def test_config_from_env(env_sqlite):
    cfg = DBConfig.from_env()
    assert cfg.driver == "sqlite"
    assert cfg.params == {"path": str(env_sqlite)}
    assert cfg.prefix == "tst_"
    assert cfg.log_queries is True
    assert cfg.source == "env"
    assert EnvLoader.debug_info()["loaded"] is True


def test_config_defaults_to_db_path(monkeypatch):
    monkeypatch.delenv("SQLITE_PATH", raising=False)
    monkeypatch.delenv("DB_DRIVER", raising=False)
    monkeypatch.setenv("DB_PATH", "some/dir/")
    assert DBConfig.from_env().params["path"] == "some/dir/app.db"


def test_unknown_driver_is_rejected(monkeypatch):
    monkeypatch.setenv("DB_DRIVER", "oracle")
    with pytest.raises(ValueError):
        DBConfig.from_env()


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("QDB_FLAG", "yes")
    monkeypatch.setenv("QDB_NUM", "12")
    monkeypatch.setenv("QDB_BAD", "x12")
    assert EnvLoader.get_bool("QDB_FLAG") is True
    assert EnvLoader.get_bool("QDB_MISSING", True) is True
    assert EnvLoader.get_int("QDB_NUM") == 12
    assert EnvLoader.get_int("QDB_BAD", 3) == 3


def test_builders_share_executor_but_not_state(env_sqlite):
    with DBManager.from_env() as db:
        assert db.get_driver_name() == "SQLiteExecutor"
        assert db.active_config()["prefix"] == "tst_"

        a = db.builder()
        b = db.builder()
        assert isinstance(a, QueryBuilder) and a is not b
        assert a.executor is b.executor

        a.query("CREATE TABLE tst_users (id INTEGER PRIMARY KEY, login TEXT)")
        a.insert("users", {"login": "ana"})
        a.where("login", "ana")
        # b ne vidi a-ov nedovršeni lanac
        assert len(b.get("users")) == 1
        assert b.get_last_query() == "SELECT * FROM tst_users"
        assert a.get_one("users")["login"] == "ana"

        assert db.builder(prefix="").get_prefix() == ""
    assert not db.is_open()
    assert db.get_driver_name() is None


def test_manager_transaction(env_sqlite):
    db = DBManager.from_env()
    try:
        qb = db.builder()
        qb.query("CREATE TABLE tst_orders (id INTEGER PRIMARY KEY, code TEXT)")
        with pytest.raises(RuntimeError):
            with db.transaction():
                qb.insert("orders", {"code": "ORD-1"})
                raise RuntimeError("fail")
        assert qb.raw_query_value("SELECT COUNT(*) FROM tst_orders") == 0
    finally:
        db.shutdown()


def test_manager_with_explicit_config():
    db = DBManager(DBConfig(driver="sqlite", params={"path": ":memory:"}, prefix="x_"))
    qb = db.builder()
    assert qb.get_prefix() == "x_"
    assert qb.ping()
    assert db.active_config()["source"] == "code"
    db.shutdown()


def test_manager_with_injected_executor(recorder):
    db = DBManager(executor=recorder)
    qb = db.builder()
    assert qb.executor is recorder
    qb.where("id", 1).get("users")
    assert recorder.last == ("SELECT * FROM users WHERE id = ?", [1])
    db.shutdown()
    assert recorder.connected is False
