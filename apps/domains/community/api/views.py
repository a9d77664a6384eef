from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.api.common.mixins import DomainErrorMixin
from apps.domains.community.api.serializers import PostSerializer
from apps.domains.community.selectors import get_manageable_posts, get_published_posts
from apps.domains.community.services import CommunityService


class PostViewSet(DomainErrorMixin, viewsets.ModelViewSet):
    """
    Public feed + author management.

    ✔ list / retrieve: published posts for anonymous users, plus own drafts when signed in
    ✔ update / delete / publish / unpublish: author or admin
    ✔ ?tag= filters on one tag; ?mine=1 shows only the caller's posts
    """
    serializer_class = PostSerializer
    lookup_field = "slug"
    filter_backends = [SearchFilter]
    search_fields = ["title", "body"]

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_queryset(self):
        user = self.request.user
        qs = get_manageable_posts(user) if user.is_authenticated else get_published_posts()

        tag = self.request.query_params.get("tag")
        if tag:
            # JSON containment lookups are not portable; filter tags in Python
            wanted = tag.strip().lower()
            ids = [p.id for p in qs.only("id", "tags") if wanted in (p.tags or [])]
            qs = qs.filter(id__in=ids)
        if self.request.query_params.get("mine") and user.is_authenticated:
            qs = qs.filter(author=user)
        return qs

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        post = CommunityService(request.user).create_post(serializer.validated_data)
        return Response(PostSerializer(post).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        post = self.get_object()
        serializer = self.get_serializer(post, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop("status", None)
        post = CommunityService(request.user).update_post(post, data)
        return Response(PostSerializer(post).data)

    def destroy(self, request, *args, **kwargs):
        CommunityService(request.user).delete_post(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def publish(self, request, slug=None):
        post = CommunityService(request.user).publish(self.get_object())
        return Response(PostSerializer(post).data)

    @action(detail=True, methods=["post"])
    def unpublish(self, request, slug=None):
        post = CommunityService(request.user).unpublish(self.get_object())
        return Response(PostSerializer(post).data)
