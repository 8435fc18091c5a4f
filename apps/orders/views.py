from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from config.pagination import OrderPagination
from apps.accounts.permissions import HasCapability
from apps.accounts.roles import Capability
from .models import OrderStatus
from .serializers import (
    OrderSerializer,
    OrderCreateSerializer,
    OrderUpdateSerializer,
    OrderStatusSerializer,
    OrderFilterSerializer,
    BoardColumnSerializer,
    TenderSerializer,
    TenderResultSerializer,
    CurrencySerializer,
    OrderOverviewSerializer,
)
from .services import (
    MissingFieldError,
    create_order,
    get_order,
    list_orders,
    update_order_details,
    delete_order,
    transition_order,
    advance_order,
    processing_board,
    tender as calculate_tender,
    get_currency,
    order_overview,
)


def _with_message(order, message):
    data = dict(OrderSerializer(order).data)
    data['message'] = message
    return data


class OrderViewSet(viewsets.GenericViewSet):
    """
    ViewSet for orders.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Filtered, sorted, limit/offset paginated orders
    create: Validate and create an order
    retrieve: Order with customer, staff member and items
    partial_update: Change express flag, stains or payment
    destroy: Delete an order (admin only)
    update_status: Move an order to a given status
    advance: Move an order to the next status
    board: Active orders grouped by status
    tender: Cash tender calculator
    denominations: Configured notes and coins
    overview: Dashboard statistics
    """

    serializer_class = OrderSerializer
    pagination_class = OrderPagination

    capability_by_action = {
        'create': Capability.CREATE_ORDERS,
        'list': Capability.VIEW_ORDERS,
        'retrieve': Capability.VIEW_ORDERS,
        'board': Capability.VIEW_ORDERS,
        'partial_update': Capability.EDIT_ORDERS,
        'destroy': Capability.DELETE_ORDERS,
        'update_status': Capability.UPDATE_ORDER_STATUS,
        'advance': Capability.UPDATE_ORDER_STATUS,
        'tender': Capability.CREATE_ORDERS,
        'denominations': Capability.CREATE_ORDERS,
        'overview': Capability.VIEW_REPORTS,
    }

    def get_permissions(self):
        """Set permissions based on action."""
        capability = self.capability_by_action.get(self.action, Capability.VIEW_ORDERS)
        return [IsAuthenticated(), HasCapability(capability)]

    def get_queryset(self):
        filter_serializer = OrderFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_orders(**filter_serializer.to_service_kwargs())

    @extend_schema(
        parameters=[
            OpenApiParameter('status', OpenApiTypes.STR, description='Lifecycle state'),
            OpenApiParameter('customerId', OpenApiTypes.UUID, description='Filter by customer'),
            OpenApiParameter('paymentMethod', OpenApiTypes.STR, description='CASH, CARD or ON_COLLECTION'),
            OpenApiParameter('isExpress', OpenApiTypes.BOOL, description='Express orders'),
            OpenApiParameter('sortBy', OpenApiTypes.STR, description='createdAt, orderNumber, total or status'),
            OpenApiParameter('sortOrder', OpenApiTypes.STR, description='asc or desc'),
            OpenApiParameter('limit', OpenApiTypes.INT, description='Page size (max 100)'),
            OpenApiParameter('offset', OpenApiTypes.INT, description='Number of records to skip'),
        ],
    )
    def list(self, request):
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        serializer = OrderSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(request=OrderCreateSerializer, responses={201: OrderSerializer})
    def create(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = create_order(user=request.user, **serializer.to_service_kwargs())

        return Response(
            _with_message(order, 'Order created successfully'),
            status=status.HTTP_201_CREATED
        )

    @extend_schema(responses={200: OrderSerializer})
    def retrieve(self, request, pk=None):
        order = get_order(order_id=pk)
        return Response(OrderSerializer(order).data)

    @extend_schema(request=OrderUpdateSerializer, responses={200: OrderSerializer})
    def partial_update(self, request, pk=None):
        serializer = OrderUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = update_order_details(order_id=pk, **serializer.to_service_kwargs())
        return Response(_with_message(order, 'Order updated successfully'))

    def destroy(self, request, pk=None):
        delete_order(order_id=pk)
        return Response({'message': 'Order deleted successfully'})

    @extend_schema(request=OrderStatusSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=['patch'], url_path='status', url_name='status')
    def update_status(self, request, pk=None):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        new_status = serializer.validated_data.get('status')
        if not new_status:
            raise MissingFieldError('Status is required')

        order = transition_order(order_id=pk, status=new_status)
        return Response(_with_message(order, f'Order status updated to {order.status}'))

    @extend_schema(request=None, responses={200: OrderSerializer})
    @action(detail=True, methods=['post'])
    def advance(self, request, pk=None):
        order = advance_order(order_id=pk)
        return Response(_with_message(order, f'Order status updated to {order.status}'))

    @extend_schema(responses={200: BoardColumnSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def board(self, request):
        columns = [
            {
                'status': column_status,
                'label': OrderStatus(column_status).label,
                'count': len(orders),
                'orders': orders,
            }
            for column_status, orders in processing_board().items()
        ]
        return Response(BoardColumnSerializer(columns, many=True).data)

    @extend_schema(request=TenderSerializer, responses={200: TenderResultSerializer})
    @action(detail=False, methods=['post'])
    def tender(self, request):
        serializer = TenderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        result = calculate_tender(data['total'], data.get('notes'), data.get('coins'))
        return Response(TenderResultSerializer(result).data)

    @extend_schema(responses={200: CurrencySerializer})
    @action(detail=False, methods=['get'])
    def denominations(self, request):
        return Response(CurrencySerializer(get_currency().as_dict()).data)

    @extend_schema(responses={200: OrderOverviewSerializer})
    @action(detail=False, methods=['get'], url_path='stats/overview', url_name='stats-overview')
    def overview(self, request):
        return Response(OrderOverviewSerializer(order_overview()).data)
