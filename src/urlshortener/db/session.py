from __future__ import annotations
from math import ceil
from typing import Any, Iterator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, sessionmaker

from urlshortener.core.config import Settings


def timeout_connect_args(url: URL, timeout_seconds: float) -> dict[str, Any]:
    """
    Driver arguments that bound a single storage call.

    - sqlite: lock wait
    - postgresql (psycopg / psycopg2): connect timeout + server-side statement_timeout
    - mysql (pymysql / mysqlclient): connect, read and write socket timeouts
    Other backends only get the pool checkout timeout set in build_engine.
    """
    backend = url.get_backend_name()
    whole_seconds = max(1, ceil(timeout_seconds))

    if backend == "sqlite":
        return {"check_same_thread": False, "timeout": timeout_seconds}
    if backend == "postgresql":
        return {
            "connect_timeout": whole_seconds,
            "options": f"-c statement_timeout={int(timeout_seconds * 1000)}",
        }
    if backend in ("mysql", "mariadb"):
        return {
            "connect_timeout": whole_seconds,
            "read_timeout": whole_seconds,
            "write_timeout": whole_seconds,
        }
    return {}


def build_engine(settings: Settings) -> Engine:
    """
    Creates the process-wide engine.

    storage_timeout_seconds bounds how long a request waits on the store,
    see timeout_connect_args; pool checkout is bounded too where pooling
    applies.
    """
    url = make_url(settings.database_url)
    connect_args = timeout_connect_args(url, settings.storage_timeout_seconds)

    if url.get_backend_name() == "sqlite":
        return create_engine(url, connect_args=connect_args)

    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_timeout=settings.storage_timeout_seconds,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db(request: Request) -> Iterator[Session]:
    session_factory: sessionmaker[Session] = request.app.state.session_factory
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
