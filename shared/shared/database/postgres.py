"""Async SQLAlchemy plumbing: declarative base, engine, session factory and the
request-scoped session generator each service wraps in its own ``get_db``."""

import os
import ssl
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

AsyncSessionFactory = async_sessionmaker[AsyncSession]

_POOL_OPTIONS: dict[str, Any] = {
    "pool_pre_ping": True,
    "pool_size": 5,
    "max_overflow": 10,
    "pool_recycle": 3600,
}


def _ssl_argument() -> ssl.SSLContext | str | None:
    """asyncpg ``ssl`` value from DATABASE_SSL / DATABASE_SSL_CERT, or None when off."""
    mode = os.environ.get("DATABASE_SSL", "").strip().lower()
    if mode in ("", "disable"):
        return None
    cafile = os.environ.get("DATABASE_SSL_CERT", "")
    if cafile and Path(cafile).is_file():
        return ssl.create_default_context(cafile=cafile)
    # encrypted, server certificate not verified
    return "require"


def get_async_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return create_async_engine(url, **kwargs)

    options = {**_POOL_OPTIONS, **kwargs}
    ssl_arg = _ssl_argument()
    if ssl_arg is not None:
        options["connect_args"] = {**options.get("connect_args", {}), "ssl": ssl_arg}
    return create_async_engine(url, **options)


def get_async_session_factory(
    database_url: str,
    *,
    expire_on_commit: bool = False,
    **engine_kwargs: Any,
) -> AsyncSessionFactory:
    return async_sessionmaker(
        get_async_engine(database_url, **engine_kwargs),
        class_=AsyncSession,
        expire_on_commit=expire_on_commit,
        autoflush=False,
    )


async def get_session(session_factory: AsyncSessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """Commit when the handler returns normally; roll back when it raises."""
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()
