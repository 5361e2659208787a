import logging

import django_filters
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.decorators import action
from django_filters.rest_framework import DjangoFilterBackend
from .permissions import IsCartOwner
from .models import CartItem
from .serializers import (
    CartItemSerializer,
    CartItemQuantitySerializer,
    CartAddItemSerializer,
)
from .services.lines import same_metadata

logger = logging.getLogger(__name__)


class CartItemFilter(django_filters.FilterSet):
    product_id = django_filters.UUIDFilter(field_name='product_id')

    class Meta:
        model = CartItem
        fields = ['product_id']


class CartViewSet(viewsets.ModelViewSet):
    """
    Remote cart rows of the authenticated customer.

    - GET /: every row joined with its product (``?product_id=`` narrows to one product)
    - POST /: insert a row as given
    - PATCH /{id}/: change the quantity of a row
    - DELETE /{id}/: remove a row
    - POST /add_item/: add a configured product, merging into the row with the
      same product and customization
    """
    serializer_class = CartItemSerializer
    permission_classes = [IsAuthenticated, IsCartOwner]
    filter_backends = [DjangoFilterBackend]
    filterset_class = CartItemFilter
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return CartItem.objects.filter(user=self.request.user).select_related('product')

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)

    def partial_update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = CartItemQuantitySerializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(self.get_serializer(instance).data)

    @action(detail=False, methods=['post'])
    def add_item(self, request):
        """
        Body: {"product_id", "quantity", "unit_price", "metadata"}

        Increments the matching row when one exists (same product, structurally
        equal metadata); otherwise inserts a new row. Returns the resulting row.
        """
        serializer = CartAddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        product = data['product']
        metadata = data.get('metadata') or {}

        rows = self.get_queryset().filter(product=product)
        match = next((row for row in rows if same_metadata(row.metadata, metadata)), None)

        if match is not None:
            match.quantity += data['quantity']
            match.save(update_fields=['quantity', 'updated_at'])
            row, response_status = match, status.HTTP_200_OK
        else:
            row = CartItem.objects.create(
                user=request.user,
                product=product,
                quantity=data['quantity'],
                unit_price=data['unit_price'],
                metadata=metadata,
            )
            response_status = status.HTTP_201_CREATED

        logger.info("Cart of %s now holds %d x %s", request.user.id, row.quantity, product.id)
        return Response(self.get_serializer(row).data, status=response_status)
