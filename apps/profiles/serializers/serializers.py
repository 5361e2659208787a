# serializers/serializers.py

from rest_framework import serializers
from apps.products.models import Product
from apps.products.serializers.serializers import ProductCartSerializer
from apps.profiles.models import Profile, Address, SpecialOccasion, RecentlyViewed, Notification
from utils.uploads import public_url


class AddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = [
            'id',
            'label',
            'address_line1',
            'address_line2',
            'city',
            'state',
            'postcode',
            'is_default',
        ]
        read_only_fields = ['id']


class SpecialOccasionSerializer(serializers.ModelSerializer):
    class Meta:
        model = SpecialOccasion
        fields = ['id', 'name', 'date', 'occasion_type', 'reminder_enabled']
        read_only_fields = ['id']


class NotificationPreferencesSerializer(serializers.Serializer):
    order_updates = serializers.BooleanField(default=True)
    marketing = serializers.BooleanField(default=False)
    reminders = serializers.BooleanField(default=True)


class ProfileSerializer(serializers.ModelSerializer):
    email = serializers.ReadOnlyField(source='user.email')
    avatar_url = serializers.SerializerMethodField()
    favorite_flavors = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    dietary_restrictions = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    notification_preferences = serializers.JSONField(required=False)
    address = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = (
            'id',
            'user',
            'email',
            'first_name',
            'last_name',
            'phone',
            'avatar_url',
            'dob',
            'preferred_contact_method',
            'favorite_flavors',
            'dietary_restrictions',
            'notification_preferences',
            'created_at',
            'updated_at',
            'address',
        )
        read_only_fields = ('user', 'created_at', 'updated_at')

    def validate_notification_preferences(self, value):
        prefs = NotificationPreferencesSerializer(data=value)
        prefs.is_valid(raise_exception=True)
        return dict(prefs.validated_data)

    def get_avatar_url(self, obj):
        return public_url(obj.avatar, self.context.get('request'))

    def get_address(self, obj):
        """
        Return the default address of the profile owner.
        """
        address = obj.user.addresses.filter(is_default=True).first()
        if address is None:
            return None
        return AddressSerializer(address).data


class AvatarUploadSerializer(serializers.Serializer):
    avatar = serializers.FileField()


class RecentlyViewedSerializer(serializers.ModelSerializer):
    product = ProductCartSerializer(read_only=True)
    product_id = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.filter(is_available=True), source='product', write_only=True
    )

    class Meta:
        model = RecentlyViewed
        fields = ['id', 'product', 'product_id', 'viewed_at']
        read_only_fields = ['id', 'viewed_at']


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'title', 'message', 'notification_type', 'read', 'created_at']
        read_only_fields = fields
