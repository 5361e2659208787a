from rest_framework.permissions import BasePermission, SAFE_METHODS


class OrderPermission(BasePermission):
    """
    Order permissions.
    - Any authenticated customer can check out and list their own orders
    - Customers can only see and change their own orders
    - Staff can see every order but not change it
    """

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS and request.user.is_staff:
            return True
        return obj.user_id == request.user.id
