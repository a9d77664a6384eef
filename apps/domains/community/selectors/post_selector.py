from django.db.models import Q, QuerySet

from apps.domains.community.models import Post


def get_empty_post_queryset() -> QuerySet:
    return Post.objects.none()


def get_published_posts() -> QuerySet:
    """Public feed, newest first."""
    return (
        Post.objects.filter(status=Post.Status.PUBLISHED)
        .select_related("author")
        .order_by("-published_at", "-id")
    )


def get_manageable_posts(user) -> QuerySet:
    """Published posts plus the user's own drafts; admins see every draft."""
    qs = Post.objects.select_related("author")
    if user.is_superuser or getattr(user, "role", None) in ("admin", "superadmin"):
        return qs.order_by("-created_at", "-id")
    return qs.filter(Q(status=Post.Status.PUBLISHED) | Q(author=user)).order_by("-created_at", "-id")


def slug_taken(slug: str, *, exclude_id=None) -> bool:
    qs = Post.objects.filter(slug=slug)
    if exclude_id:
        qs = qs.exclude(id=exclude_id)
    return qs.exists()
