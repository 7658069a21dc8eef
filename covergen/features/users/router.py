# covergen/features/users/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from covergen.features.community.service import post_view
from covergen.lib.auth import current_user, require_user
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import paginate, success
from covergen.lib.store import User
from .schemas import PostListType, UpdateProfileRequest
from .service import follow_status, profile, toggle_follow, update_profile, user_posts

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(rate_limit("default"))])


@router.get("/{user_id}")
async def profile_endpoint(user_id: str, viewer: Optional[User] = Depends(current_user)):
    return success(profile(user_id, viewer.id if viewer else None))


@router.patch("/{user_id}")
async def update_profile_endpoint(user_id: str, req: UpdateProfileRequest, user: User = Depends(require_user)):
    return success(update_profile(user_id, user.id, req.model_dump()))


@router.post("/{user_id}/follow")
async def follow_endpoint(user_id: str, user: User = Depends(require_user)):
    return success(toggle_follow(user.id, user_id))


@router.get("/{user_id}/follow")
async def follow_status_endpoint(user_id: str, viewer: Optional[User] = Depends(current_user)):
    return success(follow_status(viewer.id if viewer else None, user_id))


@router.get("/{user_id}/posts")
async def user_posts_endpoint(
    user_id: str,
    type: PostListType = Query("posts"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    viewer: Optional[User] = Depends(current_user),
):
    viewer_id = viewer.id if viewer else None
    posts = [post_view(p, viewer_id) for p in user_posts(user_id, type)]
    return success(paginate(posts, page=page, limit=limit))
