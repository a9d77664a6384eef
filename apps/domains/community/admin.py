from django.contrib import admin

from .models import Post


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "slug", "author", "status", "published_at")
    list_filter = ("status",)
    search_fields = ("title", "body", "author__name")
    readonly_fields = ("published_at",)
