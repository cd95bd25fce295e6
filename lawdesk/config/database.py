from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from .settings import settings
import logging

logger = logging.getLogger(__name__)

is_sqlite = "sqlite" in settings.database_url

# PostgreSQL specific connection args for better stability
postgres_connect_args = {
    "connect_timeout": 10,
    "application_name": "lawdesk",
    "keepalives_idle": 600,
    "keepalives_interval": 30,
    "keepalives_count": 3,
} if not is_sqlite else {}

if is_sqlite:
    engine = create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
else:
    engine = create_engine(
        settings.database_url,
        connect_args=postgres_connect_args,
        pool_pre_ping=True,
        pool_recycle=1800,  # Recycle connections every 30 minutes
        pool_size=5,
        max_overflow=5,
        pool_timeout=20,
        echo=False,
    )


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enforce foreign keys on SQLite connections"""
    if is_sqlite:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base model class
Base = declarative_base()


# Database dependency
def get_db():
    """Get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
