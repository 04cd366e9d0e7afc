from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker


Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sync endpoints run in a thread pool and share pooled connections.
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=bind,
    )


def init_schema(bind: Engine) -> None:
    # Registers the tables on Base.metadata before creating them.
    from campus_booking.models import appointment, availability, user  # noqa: F401

    Base.metadata.create_all(bind=bind)
