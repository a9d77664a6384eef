from .post_selector import (
    get_empty_post_queryset,
    get_manageable_posts,
    get_published_posts,
    slug_taken,
)

__all__ = [
    "get_empty_post_queryset",
    "get_manageable_posts",
    "get_published_posts",
    "slug_taken",
]
