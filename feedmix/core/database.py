from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from feedmix.core.config import settings

# SQLite needs cross-thread access for the FastAPI threadpool
connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create tables for all saved-mix models."""
    # Models register themselves on Base when imported
    from feedmix.models import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
