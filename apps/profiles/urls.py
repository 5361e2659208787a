from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views.v1.views import (
    UserProfileViewSet,
    AddressViewSet,
    SpecialOccasionViewSet,
    RecentlyViewedViewSet,
    NotificationViewSet,
)

v1_router = DefaultRouter()
v1_router.register(r'addresses', AddressViewSet, basename='address')
v1_router.register(r'occasions', SpecialOccasionViewSet, basename='occasion')
v1_router.register(r'recently-viewed', RecentlyViewedViewSet, basename='recently-viewed')
v1_router.register(r'notifications', NotificationViewSet, basename='notification')

urlpatterns = [
    path('me/', UserProfileViewSet.as_view({'get': 'me', 'patch': 'me'}), name='user-profile-me'),
    path('me/avatar/', UserProfileViewSet.as_view({'post': 'avatar', 'delete': 'avatar'}), name='user-profile-avatar'),
    path('', include(v1_router.urls)),
]
