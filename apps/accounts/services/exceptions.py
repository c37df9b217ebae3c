"""Domain-specific exceptions for accounts services."""

from config.exceptions import DomainError, ForbiddenError, NotFoundError, UnauthorizedError


class AccountsServiceError(DomainError):
    """Base exception for accounts services."""
    pass


class InvalidCredentialsError(AccountsServiceError, UnauthorizedError):
    """Raised when authentication credentials are invalid."""
    default_code = 'invalid_credentials'
    default_detail = 'Invalid email or password.'


class InactiveAccountError(AccountsServiceError, ForbiddenError):
    """Raised when account is deactivated."""
    default_code = 'account_inactive'
    default_detail = 'Account is deactivated.'


class UserNotFoundError(AccountsServiceError, NotFoundError):
    """Raised when user does not exist."""
    default_code = 'user_not_found'
    default_detail = 'User not found.'
