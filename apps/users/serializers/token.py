from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.views import TokenObtainPairView
from django.contrib.auth import get_user_model
from rest_framework import serializers
from apps.profiles.models import Profile
from apps.profiles.serializers.serializers import ProfileSerializer


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = get_user_model()
        fields = ['id', 'username', 'email']


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Token pair for an email-or-username login.
    The response also carries the account and its profile, so a client can
    start its session (and resync its cart) without a second request.
    """
    username_field = 'email_or_username'

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        try:
            data['profile'] = ProfileSerializer(self.user.profile, context=self.context).data
        except Profile.DoesNotExist:
            data['profile'] = None
        return data


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer
