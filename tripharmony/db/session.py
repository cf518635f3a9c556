from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from tripharmony.core.config import settings

# Общий базовый класс для users и personal_access_tokens
Base = declarative_base()

def make_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    # SQLite-соединение используется из потока aiosqlite, а не из создавшего его
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_async_engine(database_url, connect_args=connect_args, echo=echo)

def make_session_factory(bind: AsyncEngine) -> sessionmaker:
    return sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)

async def init_models(bind: AsyncEngine) -> None:
    """Создаёт недостающие таблицы; существующие не трогает."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

engine = make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
async_session = make_session_factory(engine)

async def get_db():
    """Одна сессия на запрос."""
    async with async_session() as session:
        yield session
