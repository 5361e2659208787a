import logging

from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework_simplejwt.tokens import RefreshToken
from apps.users.serializers.registration import RegistrationSerializer
from apps.users.serializers.token import UserSerializer
from apps.profiles.serializers.serializers import ProfileSerializer

logger = logging.getLogger(__name__)


class RegistrationView(generics.CreateAPIView):
    """
    Endpoint for customer registration with automatic profile creation.
    """
    serializer_class = RegistrationSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def create(self, request, *args, **kwargs):
        """
        Create a new user and their profile, return JWT tokens.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Registered user %s", user.id)

        refresh = RefreshToken.for_user(user)
        tokens = {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }

        data = {
            'user': UserSerializer(user).data,
            'profile': ProfileSerializer(user.profile, context={'request': request}).data,
            'tokens': tokens,
            'message': 'Account created successfully'
        }

        return Response(data, status=status.HTTP_201_CREATED)
