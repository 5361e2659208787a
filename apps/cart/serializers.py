from rest_framework import serializers
from apps.products.serializers.serializers import ProductCartSerializer
from apps.products.models import Product
from .models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    """
    Remote cart row joined with the product display fields.
    """
    product = ProductCartSerializer(read_only=True)
    product_id = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(),
        required=True,
        source='product'
    )
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=0)
    quantity = serializers.IntegerField(min_value=1, default=1)
    metadata = serializers.JSONField(required=False, default=dict)

    class Meta:
        model = CartItem
        fields = [
            'id',
            'product',
            'product_id',
            'quantity',
            'unit_price',
            'metadata',
            'created_at',
        ]
        read_only_fields = ['id', 'product', 'created_at']

    def validate_metadata(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Metadata must be an object.")
        return value


class CartItemQuantitySerializer(serializers.ModelSerializer):
    """PATCH body: only the quantity of an existing row can change."""
    quantity = serializers.IntegerField(min_value=1)

    class Meta:
        model = CartItem
        fields = ['quantity']


class CartAddItemSerializer(serializers.Serializer):
    """
    Adds a configured product to the cart, merging into an existing row with
    the same product and the same customization.
    """
    product_id = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), source='product')
    quantity = serializers.IntegerField(min_value=1, default=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=0)
    metadata = serializers.JSONField(required=False, default=dict)

    def validate_metadata(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Metadata must be an object.")
        return value


class CartLineStateSerializer(serializers.Serializer):
    """Validates one persisted client-side line before it is hydrated."""
    id = serializers.CharField()
    product_id = serializers.CharField()
    name = serializers.CharField(allow_blank=True)
    price = serializers.DecimalField(max_digits=20, decimal_places=10, min_value=0)
    quantity = serializers.IntegerField(min_value=1)
    image_url = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    category = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    metadata = serializers.DictField(required=False, default=dict)
