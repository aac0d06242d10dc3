"""Configuration loading, logging setup, test stores and SQL capture."""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from query_asserter.config import load_config
from query_asserter.db.base import get_engine, session_scope
from query_asserter.db.sql_capture import SqlCapture
from query_asserter.db.test_store import SqliteTestStore, SqliteTestStoreFactory
from query_asserter.logging_setup import _dict_config, configure_logging
from query_asserter.models.funky_data import FunkyCustomer, FunkyDataBase, create_funky_customers

_ENV_KEYS = [
    "QUERY_ASSERTER_SQLITE_STORE_DIR",
    "QUERY_ASSERTER_CAPTURE_SQL",
    "QUERY_ASSERTER_CAPTURE_MAX_STATEMENTS",
    "QUERY_ASSERTER_LOG_LEVEL",
]


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# -----------------------------
# Configuration
# -----------------------------


def test_defaults(clean_env):
    cfg = load_config()
    assert set(type(cfg).model_fields) == {"sqlite", "capture", "logging"}
    assert cfg.sqlite.store_dir is None
    assert cfg.capture.enabled is True
    assert cfg.capture.max_statements == 1000
    assert cfg.logging.level == "INFO"


def test_json_file_is_base(clean_env):
    (clean_env / "query_asserter_config.json").write_text(
        json.dumps({"sqlite": {"store_dir": "from_json"}, "capture": {"enabled": False}}),
        encoding="utf-8",
    )
    cfg = load_config()
    assert cfg.sqlite.store_dir == "from_json"
    assert cfg.capture.enabled is False


def test_text_override_beats_json(clean_env):
    (clean_env / "query_asserter_config.json").write_text(
        json.dumps({"sqlite": {"store_dir": "from_json"}}), encoding="utf-8"
    )
    (clean_env / "config").mkdir()
    (clean_env / "config" / "sqlite.store_dir").write_text("from_file\n", encoding="utf-8")
    assert load_config().sqlite.store_dir == "from_file"


def test_env_beats_everything(clean_env, monkeypatch):
    (clean_env / "config").mkdir()
    (clean_env / "config" / "logging.level").write_text("ERROR", encoding="utf-8")
    (clean_env / "config" / "capture.max_statements").write_text("5", encoding="utf-8")
    monkeypatch.setenv("QUERY_ASSERTER_LOG_LEVEL", "debug")
    monkeypatch.setenv("QUERY_ASSERTER_CAPTURE_MAX_STATEMENTS", "7")
    cfg = load_config()
    assert cfg.logging.level == "DEBUG"
    assert cfg.capture.max_statements == 7


def test_invalid_json_falls_back_to_defaults(clean_env):
    (clean_env / "query_asserter_config.json").write_text("{not json", encoding="utf-8")
    assert load_config().capture.max_statements == 1000


@pytest.mark.parametrize(
    "key,value",
    [
        ("QUERY_ASSERTER_LOG_LEVEL", "LOUD"),
        ("QUERY_ASSERTER_CAPTURE_MAX_STATEMENTS", "0"),
        ("QUERY_ASSERTER_CAPTURE_MAX_STATEMENTS", "many"),
    ],
)
def test_invalid_values_raise(clean_env, monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ValidationError):
        load_config()


# -----------------------------
# Logging
# -----------------------------


def test_configure_logging_keeps_existing_handlers(monkeypatch):
    root = logging.getLogger()
    existing = logging.NullHandler()
    monkeypatch.setattr(root, "handlers", [existing])
    configure_logging("DEBUG")
    assert root.handlers == [existing]


def test_logging_dict_config_shape():
    cfg = _dict_config("DEBUG")
    assert cfg["root"] == {"level": "DEBUG", "handlers": ["console"]}
    assert cfg["handlers"]["console"]["stream"] == "ext://sys.stdout"
    assert cfg["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
    assert cfg["disable_existing_loggers"] is False


# -----------------------------
# Test stores
# -----------------------------


def test_file_backed_store(clean_env):
    store = SqliteTestStore("FileStore", store_dir=str(clean_env / "stores"))
    store.initialize(FunkyDataBase.metadata, lambda s: s.add_all(create_funky_customers()))
    try:
        assert (clean_env / "stores" / "FileStore.db").exists()
        with store.create_session() as session:
            assert len(session.scalars(select(FunkyCustomer)).all()) == len(create_funky_customers())
    finally:
        store.dispose()


def test_initialize_resets_previous_rows(clean_env):
    store = SqliteTestStore("ResetStore")
    try:
        store.initialize(FunkyDataBase.metadata, lambda s: s.add_all(create_funky_customers()))
        store.initialize(FunkyDataBase.metadata)
        with store.create_session() as session:
            assert session.scalars(select(FunkyCustomer)).all() == []
    finally:
        store.dispose()


def test_factory_reads_store_dir(clean_env, monkeypatch):
    monkeypatch.setenv("QUERY_ASSERTER_SQLITE_STORE_DIR", str(clean_env))
    store = SqliteTestStoreFactory.INSTANCE.create("Factory")
    assert store.url.endswith("Factory.db")


def test_store_name_required():
    with pytest.raises(ValueError):
        SqliteTestStore(" ")


def test_session_scope_rolls_back_on_error(clean_env):
    store = SqliteTestStore("RollbackStore").initialize(FunkyDataBase.metadata)
    try:
        with pytest.raises(RuntimeError):
            with session_scope(store.engine) as session:
                session.add(FunkyCustomer(id=99, first_name="x"))
                session.flush()
                raise RuntimeError("boom")
        with store.create_session() as session:
            assert session.get(FunkyCustomer, 99) is None
    finally:
        store.dispose()


def test_engine_cache_returns_same_engine():
    url = "sqlite+pysqlite:///file:EngineCache?mode=memory&cache=shared&uri=true"
    assert get_engine(url) is get_engine(url)


# -----------------------------
# SQL capture
# -----------------------------


def test_capture_attach_detach_and_bound(clean_env):
    store = SqliteTestStore("CaptureStore").initialize(FunkyDataBase.metadata)
    capture = SqlCapture(max_statements=2).attach(store.engine)
    try:
        with store.create_session() as session:
            for _ in range(3):
                session.execute(select(FunkyCustomer.id)).all()
        assert len(capture.statements) == 2
        assert "funky_customers" in capture.sql
        capture.detach()
        capture.clear()
        with store.create_session() as session:
            session.execute(select(FunkyCustomer.id)).all()
        assert capture.statements == []
    finally:
        capture.detach()
        store.dispose()


def test_capture_rejects_non_positive_bound():
    with pytest.raises(ValueError):
        SqlCapture(max_statements=0)
