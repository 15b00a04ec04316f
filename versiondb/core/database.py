from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from versiondb.core.mirror.codec import decode_text


# Writer engine: the only connection allowed to create and replace the mirror
def create_writer_engine(path: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(f"sqlite+aiosqlite:///{path}", echo=echo)


# Reader engine: opens a fresh read-only connection for every query
def create_reader_engine(path: str, echo: bool = False) -> AsyncEngine:
    engine = create_async_engine(
        f"sqlite+aiosqlite:///file:{path}?mode=ro&uri=true",
        echo=echo,
        poolclass=NullPool,
    )

    # Broken UTF-8 in stored text should come back replaced, not raise mid-fetch
    @event.listens_for(engine.sync_engine, "connect")
    def _set_text_factory(dbapi_connection, connection_record):
        dbapi_connection.driver_connection.text_factory = decode_text

    return engine


# All the mirrored tables are "stored" in the Base class
class Base(DeclarativeBase):
    pass
