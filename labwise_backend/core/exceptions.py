"""API error handling shared by all apps."""

import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


def api_exception_handler(exc, context):
    """DRF exception handler returning a generic 500 body for unexpected errors."""
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    logger.exception('Unhandled error in %s', view.__class__.__name__ if view else 'view', exc_info=exc)
    return Response(
        {'detail': 'Internal Server Error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
