from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from moat.config import get_settings

settings = get_settings()

engine = create_async_engine(settings.database_url, echo=settings.db_echo)

AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)
