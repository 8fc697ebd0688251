# pos/views/errors.py

"""
API ERROR NORMALIZATION

Canonical body: {"error": {"code": "...", "message": "..."}}
Engine errors keep their code (upper-cased) and message.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response

from pos.services import exceptions

_ENGINE_STATUS = {
    exceptions.NotFound: status.HTTP_404_NOT_FOUND,
    exceptions.OperationInProgress: status.HTTP_409_CONFLICT,
    exceptions.NetworkError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def engine_error_response(exc: exceptions.PosError):
    http_status = status.HTTP_400_BAD_REQUEST
    for cls, mapped in _ENGINE_STATUS.items():
        if isinstance(exc, cls):
            http_status = mapped
            break
    return error_response(code=exc.code.upper(), message=exc.message, http_status=http_status)


def validation_error_response(exc: DjangoValidationError):
    return error_response(
        code="VALIDATION_ERROR",
        message="; ".join(str(m) for m in exc.messages),
        http_status=status.HTTP_400_BAD_REQUEST,
    )
