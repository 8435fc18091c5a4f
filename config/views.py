import logging

from django.db import connection
from django.http import JsonResponse
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def health_check(request):
    """Liveness probe that also touches the database."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except Exception:
        logger.exception('Health check database probe failed')
        return JsonResponse({'status': 'unhealthy'}, status=503)
    return JsonResponse({'status': 'ok'})


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)


def _first_message(detail):
    """Return the first human readable message from a nested DRF error payload."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            if key == 'non_field_errors':
                return _first_message(value)
            return f'{key}: {_first_message(value)}'
    if isinstance(detail, (list, tuple)):
        for value in detail:
            if value:
                return _first_message(value)
    return str(detail)


def _first_code(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_code(value)
    if isinstance(detail, (list, tuple)):
        for value in detail:
            if value:
                return _first_code(value)
    return getattr(detail, 'code', None)


def api_exception_handler(exc, context):
    """
    Render every API error as ``{"error": message, "code": code}``.

    Field validation failures keep the full DRF payload under ``details``.
    Exceptions DRF does not know about become a generic 500.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception(
            'Unhandled error in %s', view.__class__.__name__ if view else 'API view'
        )
        return Response(
            {'error': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    data = response.data
    if isinstance(exc, ValidationError):
        response.data = {
            'error': _first_message(data),
            'code': _first_code(data) or 'invalid',
            'details': data,
        }
    elif isinstance(data, dict) and 'detail' in data:
        detail = data['detail']
        response.data = {
            'error': str(detail),
            'code': getattr(detail, 'code', None),
        }
    return response
