from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from orderdesk.config import settings


class Base(DeclarativeBase):
    pass


engine_kwargs = {"echo": settings.LOG_SQL}
if settings.DB_URL.startswith("sqlite"):
    # one connection per session; pooled aiosqlite connections do not survive event loop changes
    engine_kwargs["poolclass"] = NullPool
    engine_kwargs["connect_args"] = {"timeout": 30}
else:
    engine_kwargs["pool_pre_ping"] = True

engine = create_async_engine(settings.DB_URL, **engine_kwargs)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


async def get_db():
    async with SessionLocal() as db:
        yield db


async def init_models():
    # importing the models package registers every table on Base.metadata
    import orderdesk.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_models():
    import orderdesk.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
