from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def build_engine(database_url: str):
    engine = create_engine(database_url, future=True)
    if database_url.startswith("sqlite"):
        # SQLite only honours ON DELETE rules when asked per connection.
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_local(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(session_local) -> Generator:
    db = session_local()
    try:
        yield db
    finally:
        db.close()
