import re

from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.db import transaction
from apps.profiles.models import Profile

User = get_user_model()

# Malaysian (+60) or Indian (+91) numbers, country code required
PHONE_RE = re.compile(r'^(\+?60|\+?91)[0-9]{9,10}$')


def clean_text(value):
    """Trims input and strips angle brackets."""
    return re.sub(r'[<>]', '', value.strip())


class RegistrationSerializer(serializers.ModelSerializer):
    """
    Serializer for registering new customers with password confirmation and profile data.
    """
    password = serializers.CharField(write_only=True, required=True, style={'input_type': 'password'})
    password_confirm = serializers.CharField(write_only=True, required=True, style={'input_type': 'password'})

    # Profile fields
    first_name = serializers.CharField(max_length=150, required=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=True)

    class Meta:
        model = User
        fields = [
            'username', 'email', 'password', 'password_confirm',
            'first_name', 'last_name', 'phone',
        ]
        extra_kwargs = {'email': {'validators': []}}

    def validate_email(self, value):
        email = clean_text(value).lower()
        if User.objects.filter(email=email).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return email

    def validate_phone(self, value):
        phone = re.sub(r'[\s-]', '', clean_text(value))
        if not PHONE_RE.match(phone):
            raise serializers.ValidationError(
                "Please enter a valid phone number with country code (+60 or +91)."
            )
        return phone

    def validate_password(self, value):
        if len(value) < 8:
            raise serializers.ValidationError("Password must be at least 8 characters.")
        if not re.search(r'[0-9]', value):
            raise serializers.ValidationError("Password must contain at least one number.")
        if not re.search(r'[a-zA-Z]', value):
            raise serializers.ValidationError("Password must contain at least one letter.")
        return value

    def validate(self, attrs):
        if attrs.get('password') != attrs.get('password_confirm'):
            raise serializers.ValidationError({'password_confirm': "Passwords do not match."})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        """
        Create the user and profile in a single transaction.
        """
        profile_data = {
            'first_name': clean_text(validated_data.pop('first_name')),
            'last_name': clean_text(validated_data.pop('last_name', '')),
            'phone': validated_data.pop('phone'),
        }
        validated_data.pop('password_confirm', None)

        user = User.objects.create_user(
            username=validated_data['username'],
            email=validated_data['email'],
            password=validated_data['password'],
        )
        Profile.objects.create(user=user, **profile_data)

        return user
