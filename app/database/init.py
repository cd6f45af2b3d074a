from config import DATABASE_URL

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, scoped_session


class Base(DeclarativeBase):
    pass


connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # request handlers and background tasks share the file from several threads
    connect_args = {"check_same_thread": False, "timeout": 30}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = scoped_session(sessionmaker(autocommit=False, autoflush=False, bind=engine))


def get_db():
    # one session per request; the dependency and the endpoint may run on different threads
    db = SessionLocal.session_factory()
    try:
        yield db
    finally:
        db.close()
