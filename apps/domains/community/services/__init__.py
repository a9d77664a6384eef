from .community_service import CommunityService, unique_slug

__all__ = ["CommunityService", "unique_slug"]
