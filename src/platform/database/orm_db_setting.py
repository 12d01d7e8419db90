"""
SQLAlchemy async engine and session management

`Database` is the explicit storage handle of the service. It is created once by the DI
container, handed to the Unit of Work factory and the query repositories, and disposed by
the application lifespan. Nothing in the service reaches for a module-level engine.

The engine is bound to the event loop it was created on; when the running loop changes
(e.g. pytest-asyncio function-scoped loops, TestClient portal threads) a fresh engine is
created for the new loop.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


class Base(DeclarativeBase):
    pass


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == 'sqlite'


def _engine_kwargs(url: str, echo: bool) -> dict[str, Any]:
    kwargs: dict[str, Any] = {'echo': echo}
    if _is_sqlite(url):
        # Writers wait on the database lock instead of failing immediately
        kwargs['connect_args'] = {'timeout': 30}
        return kwargs
    kwargs.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_POOL_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
    )
    return kwargs


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


class Database:
    def __init__(self, *, url: Optional[str] = None, echo: Optional[bool] = None) -> None:
        self.url = url or settings.DATABASE_URL_ASYNC
        self.echo = settings.DB_ECHO if echo is None else echo
        self._engine: Optional[AsyncEngine] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def is_sqlite(self) -> bool:
        return _is_sqlite(self.url)

    @property
    def engine(self) -> AsyncEngine:
        try:
            current_loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if self._engine is not None and current_loop is not None and self._loop is not current_loop:
            # The old engine's connections belong to a dead loop; let them be collected
            Logger.base.warning('🔄 [DB] Event loop changed, recreating engine')
            self._engine = None
            self._session_maker = None

        if self._engine is None:
            self._engine = create_async_engine(self.url, **_engine_kwargs(self.url, self.echo))
            if self.is_sqlite:
                event.listen(self._engine.sync_engine, 'connect', _enable_sqlite_foreign_keys)
            self._loop = current_loop
            Logger.base.info(f'🔗 [DB] Engine created for {self._engine.url.render_as_string()}')
        return self._engine

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.engine
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_maker

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_maker() as session:
            yield session

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️ [DB] Tables ensured')

    async def drop_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            Logger.base.info('🔌 [DB] Engine disposed')
        self._engine = None
        self._session_maker = None
        self._loop = None
