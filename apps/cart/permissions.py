from rest_framework.permissions import BasePermission
from .models import CartItem


class IsCartOwner(BasePermission):
    """
    Only the owner of a cart row may read or change it.
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if isinstance(obj, CartItem):
            return obj.user_id == request.user.id
        return False
