from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession
from moat.db.session import AsyncSessionLocal

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency to get an async database session."""
    async with AsyncSessionLocal() as session:
        # Transaction boundaries live in the service layer
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
