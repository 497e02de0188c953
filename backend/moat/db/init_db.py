import logging

from moat.db.base_class import Base
from moat.db.session import engine

# Register every table on Base.metadata
from moat.models import company, financials, valuation  # noqa: F401

logger = logging.getLogger(__name__)

async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))
