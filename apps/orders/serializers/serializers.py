from rest_framework import serializers
from ..models import Order, OrderItem
from apps.profiles.models import Address
from apps.profiles.serializers.serializers import AddressSerializer
from apps.products.services import pricing
from apps.users.serializers.token import UserSerializer
from utils.uploads import public_url


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True, allow_null=True)
    total = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            'id',
            'product_id',
            'product_name',
            'quantity',
            'price_at_purchase',
            'total',
            'metadata',
        ]

    def get_total(self, obj):
        return str(pricing.round_price(obj.get_total()))


class OrderSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    shipping_address = AddressSerializer(read_only=True)
    receipt_url = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id',
            'user',
            'status',
            'total_amount',
            'delivery_type',
            'shipping_address',
            'contact',
            'receipt_url',
            'items',
            'created_at',
        ]

    def get_receipt_url(self, obj):
        return public_url(obj.receipt, self.context.get('request'))


class OrderContactSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')


class OrderFromCartSerializer(serializers.Serializer):
    """
    Checkout body: delivery type, the address for deliveries and optional
    contact details (defaults to the customer's profile).
    """
    delivery_type = serializers.ChoiceField(choices=Order.DELIVERY_CHOICES, default=Order.PICKUP)
    address = serializers.PrimaryKeyRelatedField(
        queryset=Address.objects.all(),
        required=False,
        allow_null=True,
    )
    contact = OrderContactSerializer(required=False)

    def validate(self, data):
        if data['delivery_type'] == Order.DELIVERY and not data.get('address'):
            raise serializers.ValidationError({
                "address": ["A delivery address is required for delivery orders."]
            })
        return data


class ReceiptUploadSerializer(serializers.Serializer):
    receipt = serializers.FileField()
