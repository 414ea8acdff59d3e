import logging
from contextlib import asynccontextmanager

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def atomic(db: AsyncSession):
    """Commit everything done in the block, or roll all of it back."""
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        logger.debug("Transaction rolled back", exc_info=True)
        raise


async def claim_row(db: AsyncSession, model, pk: int) -> None:
    """Take the write lock for ``model`` row ``pk`` before it is read.

    PostgreSQL gets this from ``SELECT ... FOR UPDATE``. SQLite ignores that
    clause, so there a no-op write takes the database write lock instead and
    a concurrent writer waits here until this transaction ends.
    """
    if db.get_bind().dialect.name != "sqlite":
        return
    await db.execute(
        update(model)
        .where(model.id == pk)
        .values(updated_at=model.updated_at)
        .execution_options(synchronize_session=False)
    )
