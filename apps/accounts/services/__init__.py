"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
)
from .user_authentication import authenticate_user
from .savings import credit_savings, get_savings_snapshot

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    # Services
    'authenticate_user',
    'credit_savings',
    'get_savings_snapshot',
]
