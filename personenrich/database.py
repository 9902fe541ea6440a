"""
Database schema and connection management.

Uses SQLAlchemy for person storage; SQLite by default, any SQLAlchemy URL works.
"""

from pathlib import Path
from sqlalchemy import create_engine, Column, String, Integer, Float, DateTime
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class PersonRow(Base):
    """Person table model."""

    __tablename__ = "persons"

    id = Column(String(36), primary_key=True)  # uuid4 string
    name = Column(String(100), nullable=False, index=True)
    surname = Column(String(100), nullable=False, index=True)
    patronymic = Column(String(100), nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(String(10), nullable=True)
    gender_probability = Column(Float, nullable=True)
    nationality = Column(String(2), nullable=True)  # ISO 3166-1 alpha-2
    nationality_probability = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


def sqlite_url(db_path: Path) -> str:
    """Build a SQLAlchemy URL for a SQLite file."""
    return f"sqlite:///{db_path}"


def get_engine(database_url: str) -> Engine:
    """
    Create an engine, creating the parent directory of SQLite files.

    Args:
        database_url: SQLAlchemy database URL
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url)


def init_database(database_url: str) -> Engine:
    """
    Initialize database and create tables.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        The engine the tables were created with
    """
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(database_url: str) -> sessionmaker:
    """
    Get a session factory bound to a database.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        SQLAlchemy sessionmaker
    """
    return sessionmaker(bind=get_engine(database_url), expire_on_commit=False)
