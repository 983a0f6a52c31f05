# -*- coding: utf-8 -*-
"""
SQLAlchemy (asyncio) database setup for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from campus_events import config
from campus_events.exceptions import CampusEventsError, PersistenceError

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    # Render/Heroku hand out "postgres://" URLs; the async driver needs an explicit dialect
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("sqlite:///"):
        url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


def build_engine(url: str) -> AsyncEngine:
    url = normalize_database_url(url)
    if url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them
        engine = create_async_engine(url, poolclass=NullPool)

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_async_engine(
        url,
        # Checks that the connection is alive before using it
        pool_pre_ping=True,
        # Recycles connections every hour to dodge server-side timeouts
        pool_recycle=3600,
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=bind, class_=AsyncSession, autoflush=False, expire_on_commit=False)


engine = build_engine(config.DATABASE_URL)

SessionLocal = build_sessionmaker(engine)

Base = declarative_base()


async def create_tables(bind: AsyncEngine = None) -> None:
    bind = bind or engine
    database = bind.url.database
    if bind.url.get_backend_name() == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Session dependency (used with Depends)
async def get_db() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as db:
        yield db


@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Runs a block of work as a single transaction.

    Commits when the block finishes; on any error every write of the block is
    rolled back before the error propagates. Driver errors surface as
    PersistenceError.
    """
    try:
        yield db
        await db.commit()
    except CampusEventsError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Transaction rolled back after a database error")
        raise PersistenceError(str(exc)) from exc
    except Exception:
        await db.rollback()
        raise
