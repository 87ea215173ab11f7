"""
Error types and the unified API exception handler.

Every error leaves the API as ``{'ok': False, 'error': {'code', 'message'}}``.
Fetch failures carry a static message; mutation failures carry the care
backend's own message when it sent one.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class BackendUnavailable(APIException):
    """A collection could not be fetched from the care backend."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Error loading data from the care backend.'
    default_code = 'backend_unavailable'


class MutationFailed(APIException):
    """The care backend refused or failed an action."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Something went wrong.'
    default_code = 'mutation_failed'

    def __init__(self, detail=None, code=None, status_code=None):
        super().__init__(detail, code)
        if status_code is not None:
            self.status_code = status_code


class MutationInProgress(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This action is already being processed.'
    default_code = 'in_progress'


class SelectionIncomplete(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Please complete the selection first.'
    default_code = 'incomplete_selection'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    code = 'api_error'
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        code = codes if isinstance(codes, str) else exc.default_code
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data if isinstance(resp.data, list) else str(resp.data)
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
