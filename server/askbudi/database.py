# server/askbudi/database.py
"""Store handle.

The engine and session factory live on a ``Database`` object built by the
application factory and attached to ``app.state``. Request handlers get a
session through the ``get_db`` dependency; everything below the routes takes
an explicit ``Session`` argument.
"""
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

Base = declarative_base()


class Database:
    def __init__(self, url: str, **engine_kwargs):
        if url.startswith("sqlite") and "connect_args" not in engine_kwargs:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        self.url = url
        self.engine: Engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """Yield a session bound to the application's store handle."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
