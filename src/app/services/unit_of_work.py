from abc import ABC, abstractmethod

from src.app.repositories.activity_log_repository import IActivityLogRepository
from src.app.repositories.invoice_repository import IInvoiceRepository
from src.app.repositories.job_lock_repository import IJobLockRepository
from src.app.repositories.payment_repository import IPaymentRepository
from src.app.repositories.phone_number_repository import IPhoneNumberRepository
from src.app.repositories.sequence_repository import ISequenceRepository
from src.app.repositories.tenant_repository import ITenantRepository
from src.app.repositories.usage_record_repository import IUsageRecordRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    tenants: ITenantRepository
    phone_numbers: IPhoneNumberRepository
    usage_records: IUsageRecordRepository
    invoices: IInvoiceRepository
    payments: IPaymentRepository
    activity_logs: IActivityLogRepository
    sequences: ISequenceRepository
    job_locks: IJobLockRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
