# covergen/features/community/service.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from covergen.lib.errors import ForbiddenError, NotFoundError
from covergen.lib.store import Comment, Post, store
from covergen.logger import get_logger

log = get_logger(__name__)

DETAIL_COMMENT_LIMIT = 50


def author_view(user_id: str) -> Dict[str, Any]:
    user = store.get_user(user_id)
    return {
        "id": user_id,
        "name": user.name if user else None,
        "image": user.image if user else None,
    }


def post_view(post: Post, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "description": post.description,
        "image_url": post.image_url,
        "thumbnail_url": post.thumbnail_url,
        "platform_id": post.platform_id,
        "prompt": post.prompt,
        "view_count": post.view_count,
        "like_count": store.like_count(post.id),
        "comment_count": store.comment_count(post.id),
        "liked": bool(viewer_id) and store.has_liked(viewer_id, post.id),
        "user": author_view(post.user_id),
        "created_at": post.created_at,
    }


def comment_view(c: Comment) -> Dict[str, Any]:
    return {"id": c.id, "content": c.content, "user": author_view(c.user_id), "created_at": c.created_at}


def list_public_posts(*, platform: Optional[str] = None, sort_by: str = "latest") -> List[Post]:
    posts = [p for p in store.posts.values() if p.is_public and (not platform or p.platform_id == platform)]
    if sort_by == "popular":
        posts.sort(key=lambda p: (store.like_count(p.id), p.created_at), reverse=True)
    else:
        posts.sort(key=lambda p: p.created_at, reverse=True)
    return posts


def require_post(post_id: str) -> Post:
    post = store.get_post(post_id)
    if post is None:
        raise NotFoundError("Post", post_id)
    return post


def create_post(user_id: str, **fields: Any) -> Post:
    post = store.add_post(user_id, is_public=True, **fields)
    log.info(f"post {post.id} created by {user_id}")
    return post


def post_detail(post_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    post = require_post(post_id)
    post.view_count += 1
    data = post_view(post, viewer_id)
    data["comments"] = [comment_view(c) for c in store.comments_for(post_id)[:DETAIL_COMMENT_LIMIT]]
    return data


def delete_post(post_id: str, user_id: str) -> None:
    post = require_post(post_id)
    if post.user_id != user_id:
        raise ForbiddenError("You can only delete your own posts")
    store.delete_post(post_id)
    log.info(f"post {post_id} deleted by {user_id}")


def toggle_like(post_id: str, user_id: str) -> Dict[str, Any]:
    require_post(post_id)
    liked = store.toggle_like(user_id, post_id)
    return {"liked": liked, "like_count": store.like_count(post_id)}


def add_comment(post_id: str, user_id: str, content: str) -> Comment:
    require_post(post_id)
    return store.add_comment(post_id, user_id, content)
