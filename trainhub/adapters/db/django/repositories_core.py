"""
User lookups: keeps .objects access for accounts inside the adapters layer.
"""
from __future__ import annotations


def user_get_by_username(username):
    from apps.core.models import User
    return User.objects.filter(username=username).first()


def user_get_by_id(user_id):
    from apps.core.models import User
    return User.objects.filter(id=user_id).first()


def user_filter_roles(roles):
    from apps.core.models import User
    return User.objects.filter(role__in=list(roles)).order_by("name", "id")


def user_filter_ids_role(user_ids, role):
    from apps.core.models import User
    return User.objects.filter(id__in=list(user_ids), role=role)


def user_count_role(role, *, active_only=True):
    from apps.core.models import User
    qs = User.objects.filter(role=role)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.count()


def trainers_active():
    from apps.core.models import User
    return User.objects.filter(role=User.Role.TRAINER, is_active=True)
