from rest_framework.permissions import BasePermission


class IsPaymentOwnerOrDesk(BasePermission):
    """
    Object level: a student only sees their own payments; reception / admins see all.
    """
    message = "You do not have access to this payment."

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.is_superuser or getattr(user, "role", None) in ("reception", "admin", "superadmin"):
            return True
        return obj.student_id == user.id
