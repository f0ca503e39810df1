# cloudvault/models/database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_engine(database_url: str, timeout: float | None = None) -> Engine:
    connect_args = {}
    kwargs = {}
    if database_url.startswith("sqlite"):
        # sessions are opened from FastAPI's worker threads
        connect_args["check_same_thread"] = False
        if timeout is not None:
            connect_args["timeout"] = timeout
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
    elif timeout is not None:
        kwargs["pool_timeout"] = timeout
    return create_engine(database_url, connect_args=connect_args, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    # import the row modules so their tables are registered on Base.metadata
    from cloudvault.models import file, folder, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
