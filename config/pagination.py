from django.conf import settings
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response


class StoreLimitOffsetPagination(LimitOffsetPagination):
    """
    limit/offset pagination used by the till screens.

    Responds with ``{<results_key>: [...], "pagination": {...}}`` where
    ``results_key`` is set per view (``orders``, ``customers``).
    """

    default_limit = settings.LAUNDRY_DEFAULT_PAGE_SIZE
    max_limit = settings.LAUNDRY_MAX_PAGE_SIZE
    results_key = 'results'

    def get_paginated_response(self, data):
        return Response({
            self.results_key: data,
            'pagination': {
                'total': self.count,
                'limit': self.limit,
                'offset': self.offset,
                'hasMore': self.offset + self.limit < self.count,
            }
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                self.results_key: schema,
                'pagination': {
                    'type': 'object',
                    'properties': {
                        'total': {'type': 'integer'},
                        'limit': {'type': 'integer'},
                        'offset': {'type': 'integer'},
                        'hasMore': {'type': 'boolean'},
                    },
                },
            },
        }


class OrderPagination(StoreLimitOffsetPagination):
    results_key = 'orders'


class CustomerPagination(StoreLimitOffsetPagination):
    results_key = 'customers'
