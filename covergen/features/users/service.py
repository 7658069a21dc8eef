# covergen/features/users/service.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from covergen.lib.errors import ForbiddenError, NotFoundError, ValidationError
from covergen.lib.store import Post, User, store
from covergen.logger import get_logger

log = get_logger(__name__)


def require_user_record(user_id: str) -> User:
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def profile(user_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    user = require_user_record(user_id)
    post_count = sum(1 for p in store.posts.values() if p.user_id == user_id and p.is_public)
    return {
        "id": user.id,
        "name": user.name,
        "image": user.image,
        "bio": user.bio,
        "created_at": user.created_at,
        "follower_count": store.follower_count(user_id),
        "following_count": store.following_count(user_id),
        "post_count": post_count,
        "is_following": bool(viewer_id) and store.is_following(viewer_id, user_id),
        "is_self": viewer_id == user_id,
    }


def update_profile(user_id: str, editor_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    require_user_record(user_id)
    if editor_id != user_id:
        raise ForbiddenError("You can only edit your own profile")
    fields = {k: v for k, v in changes.items() if v is not None}
    if fields:
        store.update_user(user_id, **fields)
        log.info(f"profile {user_id} updated: {', '.join(sorted(fields))}")
    return profile(user_id, editor_id)


def toggle_follow(follower_id: str, target_id: str) -> Dict[str, Any]:
    if follower_id == target_id:
        raise ValidationError("You cannot follow yourself")
    require_user_record(target_id)
    following = store.toggle_follow(follower_id, target_id)
    return {"following": following, "follower_count": store.follower_count(target_id)}


def follow_status(viewer_id: Optional[str], target_id: str) -> Dict[str, Any]:
    require_user_record(target_id)
    return {
        "following": bool(viewer_id) and store.is_following(viewer_id, target_id),
        "follower_count": store.follower_count(target_id),
        "following_count": store.following_count(target_id),
    }


def user_posts(user_id: str, kind: str = "posts") -> List[Post]:
    require_user_record(user_id)
    if kind == "liked":
        posts = [p for p in store.posts.values() if p.is_public and store.has_liked(user_id, p.id)]
    else:
        posts = [p for p in store.posts.values() if p.user_id == user_id and p.is_public]
    return sorted(posts, key=lambda p: p.created_at, reverse=True)
