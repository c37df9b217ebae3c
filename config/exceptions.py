"""
Domain error base class and DRF exception handler.

Service layers raise subclasses of ``DomainError``. Each subclass carries the
HTTP status and machine-readable code it maps to, mirroring the
``status_code`` / ``default_code`` convention of DRF's ``APIException``, but
without tying the services themselves to the HTTP layer.

Usage:
    class DealNotFoundError(DealsServiceError):
        status_code = 404
        default_code = 'deal_not_found'
        default_detail = 'Deal not found.'

    raise DealNotFoundError(f"Deal {deal_id} not found")
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base exception for all service-layer errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'domain_error'
    default_detail = 'The request could not be completed.'

    def __init__(self, message=None, **context):
        self.message = message or self.default_detail
        self.context = context
        super().__init__(self.message)

    @property
    def code(self):
        return self.default_code

    def as_dict(self):
        payload = {'error': self.message, 'code': self.code}
        if self.context:
            payload['context'] = self.context
        return payload


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = 'not_found'


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = 'conflict'


class ForbiddenError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = 'forbidden'


class UnauthorizedError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = 'unauthorized'


class ValidationFailedError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'validation_failed'


def domain_exception_handler(exc, context):
    """
    Render DomainError subclasses as ``{"error": ..., "code": ...}``.

    Everything else falls through to DRF's default handler.
    """
    if isinstance(exc, DomainError):
        view = context.get('view')
        logger.info(
            "Domain error in %s: %s (%s)",
            view.__class__.__name__ if view else 'unknown view',
            exc.code,
            exc.message,
        )
        return Response(exc.as_dict(), status=exc.status_code)

    return exception_handler(exc, context)
