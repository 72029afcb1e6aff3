"""Database connection and session management."""

import json
from decimal import Decimal

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from resourcepulse.config import Config


def decimal_json_serializer(obj):
    """JSON serializer for objects not serializable by default json code."""
    if isinstance(obj, Decimal):
        return float(obj)
    raise TypeError(f"Type {type(obj)} not serializable")


# Base class for models
Base = declarative_base()

# Engine singleton
_engine = None
_session_factory = None


def get_engine():
    """Get or create the SQLAlchemy engine."""
    global _engine
    if _engine is None:
        _engine = create_engine(
            Config.get_database_url(),
            echo=Config.SQL_ECHO,
            pool_pre_ping=True,
            json_serializer=lambda obj: json.dumps(obj, default=decimal_json_serializer),
        )
    return _engine


def get_session_factory():
    """Get or create the session factory bound to the engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _session_factory


def get_session() -> Session:
    """Create a new database session."""
    return get_session_factory()()


def get_db():
    """Dependency to get database session."""
    db = get_session()
    try:
        yield db
    finally:
        db.close()


def init_db(engine=None):
    """Initialize database tables."""
    from resourcepulse import models  # noqa: F401  registers mappers
    Base.metadata.create_all(bind=engine or get_engine())


def has_table(db: Session, table_name: str) -> bool:
    """Check whether a table exists in the database the session is bound to.

    Scenario detail degrades to empty sub-lists when supporting tables are
    missing (partially migrated environments).
    """
    return inspect(db.get_bind()).has_table(table_name)


def test_connection():
    """Test the database connection."""
    try:
        engine = get_engine()
        with engine.connect() as conn:
            result = conn.execute(text("SELECT 1"))
            result.fetchone()
        return True, "Connected to database"
    except Exception as e:
        return False, str(e)
