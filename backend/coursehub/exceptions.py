"""Typed domain errors and their rendering at the HTTP boundary.

Services raise one of the ``DomainError`` subclasses below with a
machine-readable code (``TEST_NOT_FOUND``, ``ALREADY_SUBMITTED``, ...).
The exception handler turns them into ``{"error": CODE, "detail": ...}``
bodies; every other DRF exception keeps DRF's default rendering.
"""
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied
from rest_framework.views import exception_handler as drf_exception_handler


class DomainError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be completed.'
    default_code = 'ERROR'

    def __init__(self, code, detail=None):
        super().__init__(detail=detail or code, code=code)
        self.code = code

    def __str__(self) -> str:
        return self.code


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, code='FORBIDDEN', detail=None):
        super().__init__(code, detail)


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class Invalid(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT


class Unavailable(DomainError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def exception_handler(exc, context):
    response = drf_exception_handler(exc, context)
    if response is None:
        return None
    if isinstance(exc, DomainError):
        response.data = {'error': exc.code, 'detail': str(exc.detail)}
    elif isinstance(exc, (NotAuthenticated, PermissionDenied)):
        response.data = {'error': 'FORBIDDEN', 'detail': str(exc.detail)}
    return response
