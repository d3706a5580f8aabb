from sqlalchemy import create_engine, Column, DateTime, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from tenantnotes.core.logging_config import logger


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the SQLAlchemy engine backing the key-value storage.
    
    SQLite URLs skip the pool tuning that only applies to server databases.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, echo=echo, future=True)
    else:
        engine = create_engine(
            database_url,
            pool_pre_ping=True,      # Test connections before using
            pool_size=10,            # Base connection pool size
            max_overflow=20,         # Max connections beyond pool_size
            pool_timeout=30,         # Timeout for getting connection (seconds)
            pool_recycle=3600,       # Recycle connections after 1 hour
            echo=echo,
            future=True,
        )
    logger.info(f"Storage database engine created: dialect={engine.dialect.name}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        future=True,
    )


class Base(DeclarativeBase):
    pass

class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
