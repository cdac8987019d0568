from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from apps.utils.pagination import StandardResultsSetPagination
from .exceptions import ProductNotFound
from .serializers import ProductSerializer, ProductWriteSerializer
from .services import ProductService

UUID_PATTERN = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"


class ProductViewSet(viewsets.GenericViewSet):
    """
    Product catalog. Reads are public, writes need a bearer token.
    """
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    pagination_class = StandardResultsSetPagination
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        return ProductService.list_products()

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(ProductSerializer(page, many=True).data)

    def retrieve(self, request, pk=None):
        product = ProductService.get_product(pk)
        if product is None:
            raise ProductNotFound()
        return Response(ProductSerializer(product).data)

    def create(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = ProductService.create_product(**serializer.validated_data)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = ProductService.update_product(pk, **serializer.validated_data)
        return Response(ProductSerializer(product).data)

    def destroy(self, request, pk=None):
        if not ProductService.delete_product(pk):
            raise ProductNotFound()
        return Response(status=status.HTTP_204_NO_CONTENT)
