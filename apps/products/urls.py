from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views.v1.views import CategoryViewSet, ProductOptionViewSet, ProductViewSet

v1_router = DefaultRouter()
v1_router.register(r'categories', CategoryViewSet, basename='category')
v1_router.register(r'options', ProductOptionViewSet, basename='product-option')
v1_router.register(r'', ProductViewSet, basename='product')

urlpatterns = [
    path('', include(v1_router.urls)),
]
