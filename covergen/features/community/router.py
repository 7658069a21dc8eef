# covergen/features/community/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from covergen.lib.auth import current_user, require_user
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import paginate, success
from covergen.lib.store import User, store
from .schemas import CreateCommentRequest, CreatePostRequest, SortBy
from .service import (
    add_comment,
    comment_view,
    create_post,
    delete_post,
    list_public_posts,
    post_detail,
    post_view,
    require_post,
    toggle_like,
)

router = APIRouter(prefix="/api/community", tags=["community"], dependencies=[Depends(rate_limit("default"))])


@router.get("")
async def list_posts_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    platform: Optional[str] = Query(None),
    sort_by: SortBy = Query("latest"),
    user: Optional[User] = Depends(current_user),
):
    viewer = user.id if user else None
    posts = [post_view(p, viewer) for p in list_public_posts(platform=platform, sort_by=sort_by)]
    return success(paginate(posts, page=page, limit=limit))


@router.post("", status_code=201)
async def create_post_endpoint(req: CreatePostRequest, user: User = Depends(require_user)):
    post = create_post(user.id, **req.model_dump())
    return success(post_view(post, user.id))


@router.get("/{post_id}")
async def post_endpoint(post_id: str, user: Optional[User] = Depends(current_user)):
    return success(post_detail(post_id, user.id if user else None))


@router.delete("/{post_id}")
async def delete_post_endpoint(post_id: str, user: User = Depends(require_user)):
    delete_post(post_id, user.id)
    return success({"deleted": True})


@router.post("/{post_id}/like")
async def like_endpoint(post_id: str, user: User = Depends(require_user)):
    return success(toggle_like(post_id, user.id))


@router.get("/{post_id}/comments")
async def comments_endpoint(post_id: str, page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=50)):
    require_post(post_id)
    comments = [comment_view(c) for c in store.comments_for(post_id)]
    return success(paginate(comments, page=page, limit=limit))


@router.post("/{post_id}/comments", status_code=201)
async def add_comment_endpoint(post_id: str, req: CreateCommentRequest, user: User = Depends(require_user)):
    return success(comment_view(add_comment(post_id, user.id, req.content)))
