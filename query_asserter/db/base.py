"""SQLAlchemy engine and session helpers.

Test stores target SQLite by default but any SQLAlchemy URL works. No
declarative models are defined here; this module only manages connection
lifecycle.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or "mode=memory" in url)


# Module-level cache so every caller asking for a URL shares one Engine
_ENGINES: Dict[str, Engine] = {}


def get_engine(url: str) -> Engine:
    """Return a cached SQLAlchemy Engine for the given URL.

    For in-memory SQLite URLs, use a StaticPool to keep a single connection
    alive; the database would vanish with the last connection otherwise.
    """
    engine = _ENGINES.get(url)
    if engine is None:
        kwargs: dict = {"future": True}
        if _is_memory_sqlite(url):
            kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        else:
            kwargs["pool_pre_ping"] = True
        engine = create_engine(url, **kwargs)
        _ENGINES[url] = engine
        logger.debug("engine_created url=%s", engine.url.render_as_string(hide_password=True))

    return engine


def dispose_engine(url: str) -> None:
    """Dispose and forget the cached Engine for ``url`` (no-op if absent)."""
    engine = _ENGINES.pop(url, None)
    if engine is not None:
        engine.dispose()
        logger.debug("engine_disposed url=%s", engine.url.render_as_string(hide_password=True))


def get_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, future=True)


@contextmanager
def session_scope(engine: Engine) -> Generator[Session, None, None]:
    """Yield a Session that commits on success and rolls back on error."""
    Session_ = get_sessionmaker(engine)
    session = Session_()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.error("DB session error; transaction rolled back", exc_info=True)
        raise
    finally:
        session.close()


__all__ = ["get_engine", "dispose_engine", "get_sessionmaker", "session_scope"]
