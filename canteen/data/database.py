# canteen/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from canteen.utils.settings import DATABASE_URL

#sqlite only, the session is used from fastapi worker threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

Base = declarative_base()


def get_db():
    """Yield a SQLAlchemy session for a single request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # models must be imported before create_all so they are registered on Base.metadata
    import canteen.data.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
