from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from config.pagination import CustomerPagination
from apps.accounts.permissions import HasCapability
from apps.accounts.roles import Capability
from .serializers import (
    CustomerSerializer,
    CustomerDetailSerializer,
    CustomerFilterSerializer,
    CustomerInputSerializer,
    CustomerUpdateSerializer,
)
from .services import (
    get_customer,
    search_customers,
    upsert_customer,
    update_customer,
    delete_customer,
)


class CustomerViewSet(viewsets.GenericViewSet):
    """
    ViewSet for customer records.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Search customers (name, phone, email), limit/offset paginated
    create: Create a customer, or update the one with the same phone
    retrieve: Customer with recent orders
    partial_update: Update customer details
    destroy: Delete a customer without orders (admin only)
    """

    serializer_class = CustomerSerializer
    pagination_class = CustomerPagination

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action == 'destroy':
            return [IsAuthenticated(), HasCapability(Capability.DELETE_CUSTOMERS)]
        return [IsAuthenticated(), HasCapability(Capability.MANAGE_CUSTOMERS)]

    def get_queryset(self):
        filter_serializer = CustomerFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return search_customers(search=filter_serializer.validated_data.get('search'))

    @extend_schema(
        parameters=[
            OpenApiParameter('search', OpenApiTypes.STR, description='Match on name, phone or email'),
            OpenApiParameter('limit', OpenApiTypes.INT, description='Page size (max 100)'),
            OpenApiParameter('offset', OpenApiTypes.INT, description='Number of records to skip'),
        ],
    )
    def list(self, request):
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        serializer = CustomerSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(request=CustomerInputSerializer, responses={200: CustomerSerializer, 201: CustomerSerializer})
    def create(self, request):
        serializer = CustomerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        customer, created = upsert_customer(**serializer.validated_data)

        data = dict(CustomerSerializer(customer).data)
        data['message'] = (
            'Customer created successfully' if created else 'Customer updated successfully'
        )
        return Response(
            data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @extend_schema(responses={200: CustomerDetailSerializer})
    def retrieve(self, request, pk=None):
        customer = get_customer(customer_id=pk)
        return Response(CustomerDetailSerializer(customer).data)

    @extend_schema(request=CustomerUpdateSerializer, responses={200: CustomerSerializer})
    def partial_update(self, request, pk=None):
        get_customer(customer_id=pk)

        serializer = CustomerUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        customer = update_customer(customer_id=pk, **serializer.validated_data)

        data = dict(CustomerSerializer(customer).data)
        data['message'] = 'Customer updated successfully'
        return Response(data)

    def destroy(self, request, pk=None):
        delete_customer(customer_id=pk)
        return Response({'message': 'Customer deleted successfully'})
