# covergen/lib/auth.py
from typing import Optional

from fastapi import Header

from covergen.lib.errors import UnauthorizedError
from covergen.lib.store import User, store


async def current_user(x_user_id: Optional[str] = Header(default=None)) -> Optional[User]:
    """
    Session auth is terminated by the front end, which forwards the signed-in
    user's id in X-User-Id. Unknown ids are provisioned on first sight.
    """
    if not x_user_id or not x_user_id.strip():
        return None
    return store.ensure_user(x_user_id.strip())


async def require_user(x_user_id: Optional[str] = Header(default=None)) -> User:
    user = await current_user(x_user_id)
    if user is None:
        raise UnauthorizedError()
    return user
