"""Posts saved outside the service (admin, shell) still get a slug and a publish time."""
from django.db.models.signals import pre_save
from django.dispatch import receiver
from django.utils import timezone

from apps.domains.community.models import Post
from apps.domains.community.services import unique_slug


@receiver(pre_save, sender=Post)
def on_post_saving(sender, instance, **kwargs):
    if not instance.slug:
        instance.slug = unique_slug(instance.title, exclude_id=instance.pk)
    if instance.status == Post.Status.PUBLISHED and instance.published_at is None:
        instance.published_at = timezone.now()
