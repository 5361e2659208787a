import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework import status
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

logger = logging.getLogger(__name__)


class LogoutView(APIView):
    """
    API endpoint that signs a customer out by blacklisting their refresh token.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        refresh_token = request.data.get('refresh_token')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                logger.warning("Logout with unusable refresh token: %s", e)
                return Response({"detail": f"Logout failed: {e}"}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"detail": "Signed out"}, status=status.HTTP_200_OK)
