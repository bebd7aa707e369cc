import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from src.domain.entities import PhoneNumber, Tenant, TenantStatus


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    uow.activity_logs.create = AsyncMock()
    return uow


@pytest.fixture
def tenant():
    return Tenant(
        id=uuid4(),
        code="ACMETE001",
        name="Jane Doe",
        business_name="Acme Telecom",
        contact_email="billing@acme.example",
        status=TenantStatus.active,
        current_balance=Decimal("200.00"),
    )


@pytest.fixture
def phone_number(tenant):
    return PhoneNumber(
        id=uuid4(),
        tenant_id=tenant.id,
        number="+15550100001",
        display_name="Main line",
        monthly_fee=Decimal("1.00"),
    )
