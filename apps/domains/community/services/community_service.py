import logging

from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from apps.core.exceptions import InvalidTransition, OwnershipError
from apps.domains.community.models import Post
from apps.domains.community.selectors import slug_taken

logger = logging.getLogger(__name__)

SLUG_MAX = 200


def unique_slug(title: str, *, exclude_id=None) -> str:
    """slugify(title), suffixed -2, -3, ... until free."""
    base = slugify(title)[:SLUG_MAX].strip("-") or "post"
    slug, n = base, 2
    while slug_taken(slug, exclude_id=exclude_id):
        slug = f"{base}-{n}"
        n += 1
    return slug


def _clean_tags(tags) -> list:
    seen = []
    for t in tags or []:
        t = str(t).strip().lower()
        if t and t not in seen:
            seen.append(t)
    return seen


class CommunityService:
    """Post writes on behalf of one user. Only the author or an admin may touch a post."""

    def __init__(self, user):
        self.user = user

    @property
    def is_admin(self) -> bool:
        return self.user.is_superuser or getattr(self.user, "role", None) in ("admin", "superadmin")

    def _check_owner(self, post: Post) -> None:
        if not self.is_admin and post.author_id != self.user.id:
            raise OwnershipError("You can only manage your own posts")

    def create_post(self, data: dict) -> Post:
        with transaction.atomic():
            post = Post(
                title=data["title"],
                body=data["body"],
                tags=_clean_tags(data.get("tags")),
                author=self.user,
            )
            post.slug = unique_slug(post.title)
            if data.get("status") == Post.Status.PUBLISHED:
                post.status = Post.Status.PUBLISHED
                post.published_at = timezone.now()
            post.save()
        logger.info("[post_create] post_id=%s author=%s status=%s", post.id, self.user.id, post.status)
        return post

    def update_post(self, post: Post, data: dict) -> Post:
        self._check_owner(post)
        fields = []
        if "title" in data and data["title"] != post.title:
            post.title = data["title"]
            post.slug = unique_slug(post.title, exclude_id=post.id)
            fields += ["title", "slug"]
        if "body" in data:
            post.body = data["body"]
            fields.append("body")
        if "tags" in data:
            post.tags = _clean_tags(data["tags"])
            fields.append("tags")
        if fields:
            post.save(update_fields=fields + ["updated_at"])
        return post

    def delete_post(self, post: Post) -> None:
        self._check_owner(post)
        logger.info("[post_delete] post_id=%s by=%s", post.id, self.user.id)
        post.delete()

    def publish(self, post: Post) -> Post:
        self._check_owner(post)
        if post.is_published:
            raise InvalidTransition("Post is already published")
        post.status = Post.Status.PUBLISHED
        post.published_at = timezone.now()
        post.save(update_fields=["status", "published_at", "updated_at"])
        logger.info("[post_publish] post_id=%s by=%s", post.id, self.user.id)
        return post

    def unpublish(self, post: Post) -> Post:
        self._check_owner(post)
        if not post.is_published:
            raise InvalidTransition("Post is not published")
        post.status = Post.Status.DRAFT
        post.published_at = None
        post.save(update_fields=["status", "published_at", "updated_at"])
        logger.info("[post_unpublish] post_id=%s by=%s", post.id, self.user.id)
        return post
