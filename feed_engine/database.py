from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base
from feed_engine.config import get_database_url

# PostgreSQL naming conventions
POSTGRES_INDEXES_NAMING_CONVENTION = {
    "ix": "%(column_0_label)s_idx",
    "uq": "%(table_name)s_%(column_0_name)s_key",
    "ck": "%(table_name)s_%(constraint_name)s_check",
    "fk": "%(table_name)s_%(column_0_name)s_fkey",
    "pk": "%(table_name)s_pkey",
}

metadata = MetaData(naming_convention=POSTGRES_INDEXES_NAMING_CONVENTION)

# Create Base class with naming conventions
Base = declarative_base(metadata=metadata)


def normalize_async_url(database_url: str) -> str:
    """Force an async driver onto plain or psycopg2 Postgres URLs"""
    if database_url.startswith("postgresql+psycopg2://"):
        return database_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def create_engine_for(database_url: str) -> AsyncEngine:
    database_url = normalize_async_url(database_url)
    return create_async_engine(
        database_url,
        echo=False,
        future=True,
        connect_args={
            "server_settings": {
                "timezone": "UTC"
            }
        } if database_url.startswith("postgresql") else {}
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    # Stores open one session per call, so concurrent reads never share a session
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Create async database engine
engine = create_engine_for(get_database_url())

AsyncSessionLocal = create_session_factory(engine)


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create all registered tables (tests and local development; production uses alembic)"""
    import feed_engine.models  # noqa: F401  registers every table on Base.metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
