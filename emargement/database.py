from threading import Lock

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

# Largest value a signed 64-bit INTEGER primary key column can hold.
MAX_ROW_ID = 2**63 - 1

_schema_lock = Lock()


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            # One shared connection, otherwise every checkout sees an empty database.
            options["poolclass"] = StaticPool
        return create_engine(database_url, **options)

    return create_engine(database_url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def ensure_schema(engine: Engine) -> None:
    # Models register their tables on Base when imported.
    from emargement.models import attendance, session, user  # noqa: F401

    with _schema_lock:
        Base.metadata.create_all(bind=engine)
