"""Services for the affiliate commission ledger and payouts."""

from .exceptions import (
    CommissionsServiceError,
    EventNotFoundError,
    EventNotPendingError,
    InvalidSaleAmountError,
    BatchNotFoundError,
    NoConfirmedEventsError,
    OverlappingBatchError,
    AlreadyPaidError,
    InvalidPeriodError,
    InvalidPayoutReferenceError,
    DealNotMonetizedError,
)
from .ledger import (
    commission_for,
    get_event,
    record_click,
    confirm_conversion,
)
from .reporting import CommissionReports
from .payouts import (
    get_batch,
    create_payout_batch,
    mark_batch_paid,
)

__all__ = [
    # Exceptions
    'CommissionsServiceError',
    'EventNotFoundError',
    'EventNotPendingError',
    'InvalidSaleAmountError',
    'BatchNotFoundError',
    'NoConfirmedEventsError',
    'OverlappingBatchError',
    'AlreadyPaidError',
    'InvalidPeriodError',
    'InvalidPayoutReferenceError',
    'DealNotMonetizedError',
    # Ledger
    'commission_for',
    'get_event',
    'record_click',
    'confirm_conversion',
    # Reporting
    'CommissionReports',
    # Payouts
    'get_batch',
    'create_payout_batch',
    'mark_batch_paid',
]
