from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.activity_log_repository import ActivityLogRepository
from src.adapter.repositories.invoice_repository import InvoiceRepository
from src.adapter.repositories.job_lock_repository import JobLockRepository
from src.adapter.repositories.payment_repository import PaymentRepository
from src.adapter.repositories.phone_number_repository import PhoneNumberRepository
from src.adapter.repositories.sequence_repository import SequenceRepository
from src.adapter.repositories.tenant_repository import TenantRepository
from src.adapter.repositories.usage_record_repository import UsageRecordRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.tenants = TenantRepository(self.session)
        self.phone_numbers = PhoneNumberRepository(self.session)
        self.usage_records = UsageRecordRepository(self.session)
        self.invoices = InvoiceRepository(self.session)
        self.payments = PaymentRepository(self.session)
        self.activity_logs = ActivityLogRepository(self.session)
        self.sequences = SequenceRepository(self.session)
        self.job_locks = JobLockRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
