from sqlalchemy import JSON, create_engine, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from meunps.config import get_settings

settings = get_settings()


def normalize_database_url(database_url: str) -> str:
    """
    Normalize database URL for psycopg3 compatibility.

    Replaces 'postgresql://' with 'postgresql+psycopg://' if psycopg driver
    is not already specified.

    Args:
        database_url: Original database URL

    Returns:
        Normalized database URL
    """
    if database_url.startswith('postgresql://') and '+psycopg' not in database_url:
        return database_url.replace('postgresql://', 'postgresql+psycopg://')
    return database_url


def build_engine(database_url: str):
    """Create the engine, with the connection settings SQLite needs."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    engine_kwargs = {"connect_args": {"check_same_thread": False}}
    # In-memory databases live only as long as their single connection
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
    sqlite_engine = create_engine(database_url, **engine_kwargs)

    @event.listens_for(sqlite_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


database_url = normalize_database_url(settings.get_database_url())

engine = build_engine(database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


def get_db():
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
