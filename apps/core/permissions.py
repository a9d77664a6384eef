#apps/core/permissions.py

from rest_framework.permissions import BasePermission, SAFE_METHODS


def _role_in(request, *roles) -> bool:
    user = request.user
    if not (user and user.is_authenticated):
        return False
    if user.is_superuser:
        return True
    return getattr(user, "role", None) in roles


class IsAdminOrStaff(BasePermission):
    """
    Admin / operator only
    """
    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and (user.is_superuser or user.is_staff or _role_in(request, "admin", "superadmin"))
        )


class IsStudent(BasePermission):
    message = "Student account required."

    def has_permission(self, request, view):
        return _role_in(request, "student")


class IsTrainer(BasePermission):
    message = "Trainer account required."

    def has_permission(self, request, view):
        return _role_in(request, "trainer")


class IsCLO(BasePermission):
    """
    CLO area. Admins see everything a CLO sees.
    """
    message = "CLO account required."

    def has_permission(self, request, view):
        return _role_in(request, "clo", "admin", "superadmin")


class IsReception(BasePermission):
    message = "Reception account required."

    def has_permission(self, request, view):
        return _role_in(request, "reception", "admin", "superadmin")


def is_inventory_manager(user) -> bool:
    if not (user and user.is_authenticated):
        return False
    return user.is_superuser or getattr(user, "role", None) in ("clo", "admin", "superadmin")


class IsInventoryManager(BasePermission):
    """
    Everybody signed in can read the catalogue; only managers write to it.
    """
    message = "Inventory manager account required."

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return is_inventory_manager(request.user)


class IsCLOOrReadOnly(BasePermission):
    """
    Competitions / teams: read for any signed-in user, writes for CLO / admin.
    """
    message = "CLO account required."

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return _role_in(request, "clo", "admin", "superadmin")
