"""Domain-specific exceptions for commission services."""

from config.exceptions import DomainError, NotFoundError, ConflictError, ValidationFailedError


class CommissionsServiceError(DomainError):
    """Base exception for commission services."""
    pass


class EventNotFoundError(CommissionsServiceError, NotFoundError):
    default_code = 'event_not_found'
    default_detail = 'Commission event not found.'


class EventNotPendingError(CommissionsServiceError, ConflictError):
    """Raised when confirming an event that was already confirmed or paid."""
    default_code = 'event_not_pending'
    default_detail = 'Commission event is not pending.'


class InvalidSaleAmountError(CommissionsServiceError, ValidationFailedError):
    default_code = 'invalid_sale_amount'
    default_detail = 'Sale amount must be greater than zero.'


class BatchNotFoundError(CommissionsServiceError, NotFoundError):
    default_code = 'batch_not_found'
    default_detail = 'Payout batch not found.'


class NoConfirmedEventsError(CommissionsServiceError, ConflictError):
    default_code = 'no_confirmed_events'
    default_detail = 'No confirmed commission events in this period.'


class OverlappingBatchError(CommissionsServiceError, ConflictError):
    """Raised when the period's events are already locked to another batch."""
    default_code = 'overlapping_batch'
    default_detail = 'Events in this period already belong to another payout batch.'


class AlreadyPaidError(CommissionsServiceError, ConflictError):
    default_code = 'already_paid'
    default_detail = 'Payout batch has already been paid.'


class InvalidPeriodError(CommissionsServiceError, ValidationFailedError):
    default_code = 'invalid_period'
    default_detail = 'Period start must not be after period end.'


class InvalidPayoutReferenceError(CommissionsServiceError, ValidationFailedError):
    default_code = 'invalid_payout_reference'
    default_detail = 'A transaction reference is required to mark a batch paid.'


class DealNotMonetizedError(CommissionsServiceError, ValidationFailedError):
    """Raised when a click is recorded for a deal that earns no commission."""
    default_code = 'deal_not_monetized'
    default_detail = 'Deal does not earn affiliate commission.'
