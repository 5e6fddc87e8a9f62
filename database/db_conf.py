from config import settings
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
import logging
import time

logger = logging.getLogger(__name__)


def build_engine(database_uri: str):
    """Create an engine suited to the database behind ``database_uri``"""
    if database_uri.startswith('sqlite'):
        # In-memory SQLite must share one connection across threads
        extra = {}
        if database_uri in ('sqlite://', 'sqlite:///:memory:'):
            extra['poolclass'] = StaticPool
        engine = create_engine(
            database_uri,
            connect_args={'check_same_thread': False},
            echo=False,
            **extra
        )
        logger.info("Using SQLite configuration")
    else:
        # Traditional PostgreSQL configuration
        engine = create_engine(
            database_uri,
            pool_size=20,
            max_overflow=20,
            pool_pre_ping=True,  # Check connection validity
            pool_recycle=300,    # Recycle every 5 minutes
            pool_timeout=30,
            echo=False
        )
        logger.info("Using PostgreSQL configuration")
    return engine


engine = build_engine(settings.DATABASE_URI)

Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Get database session, committing on success and rolling back on error"""
    session = Session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


db_context = contextmanager(get_db)


def init_db(bind=None):
    """Create all tables that do not exist yet"""
    from database.models import Base
    Base.metadata.create_all(bind=bind or engine)


def test_db_connection(max_retries=3):
    """
    Tests the database connection and returns whether it's successful.
    Includes exponential backoff for retries.

    Args:
        max_retries: Maximum number of retries to attempt

    Returns:
        tuple: (success boolean, message string)
    """
    from sqlalchemy.exc import OperationalError, DisconnectionError, DBAPIError

    retry_count = 0
    backoff = 1  # Start with 1 second

    while retry_count < max_retries:
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True, "Database connection successful"
        except (OperationalError, DisconnectionError, DBAPIError) as e:
            retry_count += 1
            error_msg = str(e)

            if retry_count < max_retries:
                logger.info(f"Retrying connection in {backoff} seconds (attempt {retry_count}/{max_retries})")
                time.sleep(backoff)
                backoff = min(backoff * 2, 10)  # Exponential backoff, max 10 seconds
            else:
                return False, f"Database connection failed after {max_retries} attempts: {error_msg}"

    return False, "Database connection failed with an unknown error"
