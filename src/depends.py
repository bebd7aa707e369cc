from typing import Optional

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.stripe_payment_provider import StripePaymentProvider
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.payment_provider import IPaymentProvider


def engine_options(db_uri: str) -> dict:
    # Concurrent SQLite writers wait on the file lock instead of failing at once
    if db_uri.startswith("sqlite"):
        return {"connect_args": {"timeout": 30}}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    ApplicationConfig.DB_URI, echo=False, future=True, **engine_options(ApplicationConfig.DB_URI)
)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_payment_provider() -> Optional[IPaymentProvider]:
    """None when no API key is configured; invoices are then kept local only"""
    if not ApplicationConfig.PAYMENT_PROVIDER_API_KEY:
        return None
    return StripePaymentProvider(
        api_key=ApplicationConfig.PAYMENT_PROVIDER_API_KEY,
        currency=ApplicationConfig.PAYMENT_PROVIDER_CURRENCY,
        webhook_secret=ApplicationConfig.PAYMENT_PROVIDER_WEBHOOK_SECRET,
    )


def get_webhook_verifier() -> IPaymentProvider:
    """Webhook payloads are decoded even when outbound calls are disabled"""
    return StripePaymentProvider(
        api_key=ApplicationConfig.PAYMENT_PROVIDER_API_KEY,
        currency=ApplicationConfig.PAYMENT_PROVIDER_CURRENCY,
        webhook_secret=ApplicationConfig.PAYMENT_PROVIDER_WEBHOOK_SECRET,
    )
