from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.utils.pagination import StandardResultsSetPagination
from .exceptions import OrderNotFound
from .filters import OrderFilter
from .serializers import AddProductSerializer, OrderSerializer
from .services import OrderService

UUID_PATTERN = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"


class OrderViewSet(viewsets.GenericViewSet):
    """
    Order lifecycle endpoints. Every response carries the recomputed total.
    """
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        return OrderService.list_orders().with_totals()

    def list(self, request):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(OrderSerializer(page, many=True).data)

    def retrieve(self, request, pk=None):
        order = OrderService.get_order(pk)
        if order is None:
            raise OrderNotFound()
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=['post'])
    def start(self, request):
        order = OrderService.start_order()
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='products')
    def add_product(self, request, pk=None):
        serializer = AddProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.add_product(pk, **serializer.validated_data)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=['delete'], url_path=rf'products/(?P<product_id>{UUID_PATTERN})')
    def remove_product(self, request, pk=None, product_id=None):
        order = OrderService.remove_product(pk, product_id)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=['patch'])
    def close(self, request, pk=None):
        order = OrderService.close_order(pk)
        return Response(OrderSerializer(order).data)
