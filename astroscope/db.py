# FILE: astroscope/db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from astroscope.config import DATABASE_URL

# Database path: ./data/astroscope.db relative to project root
# Override with ASTRO_DATABASE_URL env var if needed
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},  # Required for SQLite
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    """Create all tables. Call once at startup."""
    # Import models so Base.metadata knows about them
    from astroscope.lessons import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
