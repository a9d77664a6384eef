import pytest

from apps.core.exceptions import InvalidTransition, OwnershipError
from apps.domains.community.models import Post
from apps.domains.community.services import CommunityService, unique_slug
from tests.conftest import make_user


@pytest.fixture
def draft(student):
    return CommunityService(student).create_post(
        {"title": "Building a line follower", "body": "Step one", "tags": ["Robots", "robots ", "diy"]}
    )


class TestService:
    def test_create(self, draft):
        assert draft.slug == "building-a-line-follower"
        assert draft.status == Post.Status.DRAFT
        assert draft.published_at is None
        assert draft.tags == ["robots", "diy"]

    def test_slug_collisions(self, draft, student):
        second = CommunityService(student).create_post({"title": "Building a line follower", "body": "again"})
        assert second.slug == "building-a-line-follower-2"
        assert unique_slug("Building a line follower") == "building-a-line-follower-3"
        assert unique_slug("Building a line follower", exclude_id=draft.id) == "building-a-line-follower"

    def test_publish_cycle(self, draft, student):
        svc = CommunityService(student)
        post = svc.publish(draft)
        assert post.is_published and post.published_at is not None
        with pytest.raises(InvalidTransition):
            svc.publish(post)
        post = svc.unpublish(post)
        assert post.published_at is None
        with pytest.raises(InvalidTransition):
            svc.unpublish(post)

    def test_only_author(self, draft, student2):
        with pytest.raises(OwnershipError):
            CommunityService(student2).update_post(draft, {"body": "mine now"})
        with pytest.raises(OwnershipError):
            CommunityService(student2).delete_post(draft)

    def test_admin_may_edit(self, draft):
        admin = make_user("admin")
        post = CommunityService(admin).update_post(draft, {"title": "Renamed"})
        assert post.slug == "renamed"


class TestApi:
    def test_anonymous_sees_published_only(self, client, draft, student2):
        CommunityService(student2).create_post({"title": "Public", "body": "x", "status": "published"})
        res = client.get("/api/posts/")
        assert res.status_code == 200
        assert [p["title"] for p in res.json()["results"]] == ["Public"]

    def test_author_sees_own_draft(self, api, draft, student, student2):
        assert api(student).get(f"/api/posts/{draft.slug}/").status_code == 200
        assert api(student2).get(f"/api/posts/{draft.slug}/").status_code == 404

    def test_tag_filter(self, api, draft, student):
        assert api(student).get("/api/posts/?tag=DIY").data["count"] == 1
        assert api(student).get("/api/posts/?tag=arduino").data["count"] == 0

    def test_create_requires_login(self, client):
        res = client.post("/api/posts/", {"title": "x", "body": "y"})
        assert res.status_code in (401, 403)

    def test_publish_action(self, api, draft, student, student2):
        assert api(student2).post(f"/api/posts/{draft.slug}/publish/").status_code == 404
        res = api(student).post(f"/api/posts/{draft.slug}/publish/")
        assert res.status_code == 200
        assert res.data["status"] == "published"
        assert api(student).post(f"/api/posts/{draft.slug}/publish/").status_code == 409
