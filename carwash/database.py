from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from carwash.config import settings

# 1. Engine
# 'check_same_thread' is only needed for SQLite
connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.database_url, connect_args=connect_args)

# 2. Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 3. Declarative base for the ORM models
Base = declarative_base()


def get_db():
    """Yields a database session and closes it when the request ends."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
