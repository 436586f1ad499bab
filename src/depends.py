from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.invoice_lock import InvoiceLockManager

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

_lock_manager: Optional[InvoiceLockManager] = None


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_lock_manager() -> InvoiceLockManager:
    """Process-wide invoice lock manager; all requests must share one instance"""
    global _lock_manager
    if _lock_manager is None:
        _lock_manager = InvoiceLockManager(
            timeout_seconds=ApplicationConfig.INVOICE_LOCK_TIMEOUT_SECONDS,
            max_retries=ApplicationConfig.INVOICE_LOCK_MAX_RETRIES,
        )
    return _lock_manager
