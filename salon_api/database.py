import logging
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine with pooling and slow query logging"""
    url = settings.database_url
    try:
        if url.startswith("sqlite"):
            # SQLite has no server-side pool to tune
            engine = create_engine(url, connect_args={"check_same_thread": False}, echo=False)
        else:
            engine = create_engine(
                url,
                pool_pre_ping=True,  # Test connections before using
                pool_recycle=settings.db_pool_recycle,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
                echo=False,  # Don't log all SQL (use slow query logging instead)
            )
        logger.info("✅ Database engine created successfully")
    except Exception as e:
        logger.error(f"❌ Failed to create database engine: {e}")
        raise

    if settings.log_slow_queries:
        threshold = settings.slow_query_threshold

        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
            conn.info.setdefault("query_start_time", []).append(time.time())

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
            total = time.time() - conn.info["query_start_time"].pop(-1)
            if total > threshold:
                logger.warning(f"🐌 Slow query ({total:.2f}s): {statement[:200]}...")

        logger.info(f"📊 Slow query logging enabled (threshold: {threshold}s)")

    return engine


engine = create_db_engine(get_settings())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
