from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from takeaway.core.config import settings


def make_engine(url: str):
    # SQLite is only used locally and in tests; FastAPI runs sync routes in a threadpool.
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
Base = declarative_base()
