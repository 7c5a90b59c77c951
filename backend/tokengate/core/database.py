from pathlib import Path

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session
from .settings import settings


def make_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # check_same_thread=False is needed only for SQLite
        connect_args = {"check_same_thread": False}
        db_path = database_url.removeprefix("sqlite:///")
        if db_path and db_path != database_url and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, connect_args=connect_args)


engine = make_engine(settings.DATABASE_URL)

def create_db_and_tables(bind: Engine = engine):
    SQLModel.metadata.create_all(bind)

def get_session(request: Request):
    # The engine bound to the running app, so tests can swap it out
    with Session(request.app.state.engine) as session:
        yield session
