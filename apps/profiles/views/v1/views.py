from rest_framework import viewsets, mixins, status
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from apps.profiles.models import Profile, Address, SpecialOccasion, RecentlyViewed, Notification
from apps.profiles.serializers.serializers import (
    ProfileSerializer,
    AddressSerializer,
    SpecialOccasionSerializer,
    AvatarUploadSerializer,
    RecentlyViewedSerializer,
    NotificationSerializer,
)
from apps.profiles.services.avatars import replace_avatar, remove_avatar


class UserProfileViewSet(mixins.RetrieveModelMixin, mixins.UpdateModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for the current authenticated customer's profile.
    """
    serializer_class = ProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        try:
            return self.request.user.profile
        except Profile.DoesNotExist:
            raise NotFound("Profile not found.")

    @action(detail=False, methods=['get', 'patch'])
    def me(self, request):
        """
        Retrieve or partially update the current customer's profile.
        """
        profile = self.get_object()
        if request.method == 'PATCH':
            serializer = self.get_serializer(profile, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            serializer.save()
            return Response(serializer.data)
        return Response(self.get_serializer(profile).data)

    @action(detail=False, methods=['post', 'delete'])
    def avatar(self, request):
        """
        POST: upload a new avatar (multipart, field ``avatar``; JPEG, PNG or WebP up to 5MB).
        DELETE: remove the current avatar.
        """
        profile = self.get_object()
        if request.method == 'DELETE':
            remove_avatar(profile)
            return Response(status=status.HTTP_204_NO_CONTENT)

        upload = AvatarUploadSerializer(data=request.data)
        upload.is_valid(raise_exception=True)
        replace_avatar(profile, upload.validated_data['avatar'])
        return Response(self.get_serializer(profile).data, status=status.HTTP_200_OK)


class OwnedViewSet(viewsets.ModelViewSet):
    """CRUD restricted to rows owned by the requesting customer."""
    permission_classes = [IsAuthenticated]
    model = None

    def get_queryset(self):
        return self.model.objects.filter(user=self.request.user)

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)


class AddressViewSet(OwnedViewSet):
    model = Address
    serializer_class = AddressSerializer


class SpecialOccasionViewSet(OwnedViewSet):
    model = SpecialOccasion
    serializer_class = SpecialOccasionSerializer


class RecentlyViewedViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """
    GET: the customer's last viewed products, newest first.
    POST: record a view (``product_id``); repeated views only refresh ``viewed_at``.
    """
    serializer_class = RecentlyViewedSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return (RecentlyViewed.objects
                .filter(user=self.request.user, product__deleted_at__isnull=True)
                .select_related('product'))

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        view = RecentlyViewed.track(request.user, serializer.validated_data['product'])
        return Response(self.get_serializer(view).data, status=status.HTTP_201_CREATED)


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Inbox of the current customer. Notifications are written by the server
    (order updates, promotions); customers only read and acknowledge them.
    """
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ['read', 'notification_type']

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user)

    @action(detail=True, methods=['post'])
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        if not notification.read:
            notification.read = True
            notification.save(update_fields=['read', 'updated_at'])
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['post'])
    def mark_all_read(self, request):
        updated = self.get_queryset().filter(read=False).update(read=True)
        return Response({'updated': updated})

    @action(detail=False, methods=['get'])
    def unread_count(self, request):
        return Response({'unread': self.get_queryset().filter(read=False).count()})
