# serializers/serializers.py

from rest_framework import serializers
from apps.products.models import Category, Product, ProductOption, Review
from apps.products.services.pricing import NO_TOPPING
from utils.uploads import public_url


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'slug']
        read_only_fields = ['id', 'slug']


class ProductOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductOption
        fields = [
            'id',
            'product_type',
            'option_category',
            'option_name',
            'is_premium',
            'price_modifier',
            'description',
        ]
        read_only_fields = ['id']


class ProductSerializer(serializers.ModelSerializer):
    """
    Catalog product. ``category`` may be written by name; the category is
    created when it does not exist yet.
    """
    category = serializers.CharField(required=False, allow_null=True)
    image_url = serializers.SerializerMethodField()
    public_slug = serializers.ReadOnlyField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'public_slug', 'description', 'category',
            'product_type', 'base_price', 'premium_price', 'customizable', 'image',
            'image_url', 'is_available', 'created_at',
        ]
        read_only_fields = ['id', 'slug', 'created_at']
        extra_kwargs = {'image': {'write_only': True, 'required': False}}

    def get_image_url(self, obj):
        return public_url(obj.image, self.context.get('request'))

    def _resolve_category(self, validated_data):
        name = validated_data.pop('category', None)
        if name:
            category, _created = Category.objects.get_or_create(name=name)
            validated_data['category'] = category
        elif 'category' in self.initial_data:
            validated_data['category'] = None

    def create(self, validated_data):
        self._resolve_category(validated_data)
        return Product.objects.create(**validated_data)

    def update(self, instance, validated_data):
        self._resolve_category(validated_data)
        return super().update(instance, validated_data)


class ProductListSerializer(serializers.ModelSerializer):
    category_name = serializers.ReadOnlyField(source='category.name')
    image_url = serializers.SerializerMethodField()
    public_slug = serializers.ReadOnlyField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'public_slug', 'category_name', 'product_type',
            'base_price', 'premium_price', 'customizable', 'image_url', 'is_available',
        ]

    def get_image_url(self, obj):
        return public_url(obj.image, self.context.get('request'))


class ProductCartSerializer(serializers.ModelSerializer):
    """Product fields joined onto cart rows."""
    image_url = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ['id', 'name', 'image_url', 'base_price', 'description', 'product_type']

    def get_image_url(self, obj):
        return public_url(obj.image, self.context.get('request'))


class ReviewSerializer(serializers.ModelSerializer):
    first_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ['id', 'rating', 'comment', 'first_name', 'created_at']
        read_only_fields = ['id', 'first_name', 'created_at']

    def get_first_name(self, obj):
        profile = getattr(obj.user, 'profile', None)
        return profile.first_name if profile else None


class QuoteRequestSerializer(serializers.Serializer):
    """
    Shopper selections for a price quote.
    Quantity below one is rejected here; the pricing engine assumes it.
    """
    base = serializers.CharField(required=False, allow_blank=True, default='')
    frosting = serializers.CharField(required=False, allow_blank=True, default='')
    topping = serializers.CharField(required=False, allow_blank=True, default=NO_TOPPING)
    dietary = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    design_notes = serializers.CharField(required=False, allow_blank=True, default='')
    quantity = serializers.IntegerField(min_value=1, default=1)
