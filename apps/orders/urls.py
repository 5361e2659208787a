from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views.v1 import views as v1_views

v1_router = DefaultRouter()
v1_router.register(r'', v1_views.OrderViewSet, basename='order')

urlpatterns = [
    path('', include(v1_router.urls)),
]
