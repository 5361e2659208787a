from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.orders.models import Order
from apps.orders.serializers.serializers import (
    OrderSerializer,
    OrderFromCartSerializer,
    ReceiptUploadSerializer,
)
from apps.orders.permissions import OrderPermission
from apps.orders.services.OrdersBo import OrdersBo, CheckoutInputDTO


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Orders of the current customer.

    - GET /: own orders, newest first (staff see every order)
    - GET /{id}/: one order with its items
    - POST /from-cart/: check out the remote cart into a new order
    - POST /{id}/receipt/: upload the payment receipt of an order
    """
    permission_classes = [OrderPermission]
    order_service = OrdersBo()
    filterset_fields = ['status', 'delivery_type']

    def get_queryset(self):
        if self.request.user.is_staff:
            return Order.objects.all().prefetch_related('items').order_by('-created_at')
        return self.order_service.get_user_orders(self.request.user.id)

    def get_serializer_class(self):
        if self.action == 'create_from_cart':
            return OrderFromCartSerializer
        if self.action == 'receipt':
            return ReceiptUploadSerializer
        return OrderSerializer

    @action(detail=False, methods=['post'], url_path='from-cart')
    def create_from_cart(self, request):
        """
        Body: {"delivery_type": "pickup"|"delivery", "address": <id>, "contact": {...}}

        Prices every cart row again, creates the order and empties the cart.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        address = data.get('address')

        result = self.order_service.create_order_from_cart(CheckoutInputDTO(
            user_id=str(request.user.id),
            delivery_type=data['delivery_type'],
            address_id=address.id if address else None,
            contact=dict(data.get('contact') or {}),
        ))

        if not result.success:
            error_data = {'detail': result.error_message}
            if result.item_errors:
                error_data['item_errors'] = result.item_errors
            return Response(error_data, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            OrderSerializer(result.order, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['post'])
    def receipt(self, request, pk=None):
        """
        Multipart upload, field ``receipt``: JPEG, PNG, WebP or PDF up to 5MB.
        """
        order = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.order_service.attach_receipt(order, serializer.validated_data['receipt'])
        return Response(OrderSerializer(order, context={'request': request}).data)
