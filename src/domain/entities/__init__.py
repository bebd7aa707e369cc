"""
Billing Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    ActivityType,
    BillingCycle,
    InvoiceStatus,
    LineItemCategory,
    PaymentMethod,
    PaymentStatus,
    PhoneNumberStatus,
    PhoneNumberType,
    TenantStatus,
    UsageType,
)

# Export all entities
from .tenant import Tenant
from .phone_number import PhoneNumber
from .usage_record import UsageRecord
from .invoice import Invoice, InvoiceLineItem
from .payment import Payment
from .activity_log import ActivityLog
from .sequence_counter import SequenceCounter
from .job_lock import JobLock

__all__ = [
    # Enums
    "ActivityType",
    "BillingCycle",
    "InvoiceStatus",
    "LineItemCategory",
    "PaymentMethod",
    "PaymentStatus",
    "PhoneNumberStatus",
    "PhoneNumberType",
    "TenantStatus",
    "UsageType",
    # Entities
    "Tenant",
    "PhoneNumber",
    "UsageRecord",
    "Invoice",
    "InvoiceLineItem",
    "Payment",
    "ActivityLog",
    "SequenceCounter",
    "JobLock",
]
