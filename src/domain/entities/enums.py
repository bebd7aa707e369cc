"""
Billing Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class TenantStatus(str, Enum):
    """Tenant (client) account status"""

    active = "active"
    suspended = "suspended"
    inactive = "inactive"


class BillingCycle(str, Enum):
    """How often a tenant is invoiced"""

    monthly = "monthly"
    quarterly = "quarterly"
    annual = "annual"


class PhoneNumberStatus(str, Enum):
    """Phone number lifecycle status"""

    active = "active"
    suspended = "suspended"
    released = "released"


class PhoneNumberType(str, Enum):
    local = "local"
    toll_free = "toll_free"
    mobile = "mobile"


class UsageType(str, Enum):
    """Billable telephony action reported by the provider"""

    inbound_call = "inbound_call"
    outbound_call = "outbound_call"
    inbound_sms = "inbound_sms"
    outbound_sms = "outbound_sms"
    inbound_mms = "inbound_mms"
    outbound_mms = "outbound_mms"

    @property
    def is_call(self) -> bool:
        return self in (UsageType.inbound_call, UsageType.outbound_call)

    @property
    def is_sms(self) -> bool:
        return self in (UsageType.inbound_sms, UsageType.outbound_sms)

    @property
    def is_mms(self) -> bool:
        return self in (UsageType.inbound_mms, UsageType.outbound_mms)


class InvoiceStatus(str, Enum):
    """
    Invoice status

    Transitions: draft -> pending -> paid | overdue | cancelled,
    overdue -> paid | cancelled (late payment or write-off)
    """

    draft = "draft"
    pending = "pending"
    paid = "paid"
    overdue = "overdue"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


class PaymentMethod(str, Enum):
    credit_card = "credit_card"
    bank_transfer = "bank_transfer"
    check = "check"
    cash = "cash"
    other = "other"


class LineItemCategory(str, Enum):
    phone_rental = "phone_rental"
    usage = "usage"
    setup_fee = "setup_fee"


class ActivityType(str, Enum):
    """Audit trail event types"""

    client_created = "client_created"
    client_updated = "client_updated"
    client_suspended = "client_suspended"
    client_activated = "client_activated"
    phone_provisioned = "phone_provisioned"
    phone_released = "phone_released"
    invoice_created = "invoice_created"
    invoice_sent = "invoice_sent"
    invoice_overdue = "invoice_overdue"
    payment_received = "payment_received"
    payment_failed = "payment_failed"
    credit_added = "credit_added"
    usage_alert = "usage_alert"
    system_event = "system_event"
