# covergen/lib/store.py
"""
Process-wide in-memory repositories for accounts, billing and community data.

Everything lives in plain dicts guarded by one lock; a database can replace
this module behind the same method names.
"""
from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def month_start(now: Optional[datetime] = None, offset: int = 0) -> datetime:
    """First instant of the month `offset` months before `now` (0 = current)."""
    now = now or utcnow()
    year, month = now.year, now.month - offset
    while month < 1:
        month += 12
        year -= 1
    return datetime(year, month, 1, tzinfo=timezone.utc)


def next_month_start(now: Optional[datetime] = None) -> datetime:
    now = now or utcnow()
    if now.month == 12:
        return datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    return datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class User:
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Subscription:
    id: str
    user_id: str
    plan_type: str = "FREE"              # FREE | PRO | ENTERPRISE
    status: str = "ACTIVE"               # ACTIVE | CANCELED | PAST_DUE
    billing_cycle: Optional[str] = None  # monthly | yearly
    stripe_customer_id: Optional[str] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class UsageRecord:
    id: str
    user_id: str
    subscription_id: str
    type: str
    quantity: int = 1
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Payment:
    id: str
    user_id: str
    stripe_session_id: str
    amount: int
    currency: str
    status: str
    plan_type: str
    billing_cycle: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Post:
    id: str
    user_id: str
    title: str
    image_url: str
    thumbnail_url: str
    platform_id: str
    prompt: str
    description: Optional[str] = None
    is_public: bool = True
    view_count: int = 0
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Comment:
    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime = field(default_factory=utcnow)


class Store:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.users: Dict[str, User] = {}
            self.subscriptions: Dict[str, Subscription] = {}    # by user_id
            self.usage: List[UsageRecord] = []
            self.payments: List[Payment] = []
            self.posts: Dict[str, Post] = {}
            self.comments: List[Comment] = []
            self.likes: Set[Tuple[str, str]] = set()            # (user_id, post_id)
            self.follows: Set[Tuple[str, str]] = set()          # (follower_id, following_id)

    # ---------- users ----------
    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def ensure_user(self, user_id: str, **fields: Any) -> User:
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                user = User(id=user_id, **fields)
                self.users[user_id] = user
            return user

    def update_user(self, user_id: str, **fields: Any) -> User:
        with self._lock:
            user = self.users[user_id]
            for k, v in fields.items():
                setattr(user, k, v)
            return user

    # ---------- subscriptions / usage ----------
    def get_subscription(self, user_id: str) -> Optional[Subscription]:
        return self.subscriptions.get(user_id)

    def ensure_subscription(self, user_id: str) -> Subscription:
        with self._lock:
            sub = self.subscriptions.get(user_id)
            if sub is None:
                sub = Subscription(id=new_id(), user_id=user_id)
                self.subscriptions[user_id] = sub
            return sub

    def add_usage(self, user_id: str, subscription_id: str, type: str, quantity: int, metadata: Dict[str, Any]) -> UsageRecord:
        rec = UsageRecord(
            id=new_id(),
            user_id=user_id,
            subscription_id=subscription_id,
            type=type,
            quantity=quantity,
            metadata=metadata,
        )
        with self._lock:
            self.usage.append(rec)
        return rec

    def usage_between(self, user_id: str, start: datetime, end: Optional[datetime] = None, type: Optional[str] = None) -> List[UsageRecord]:
        with self._lock:
            out = [
                r for r in self.usage
                if r.user_id == user_id
                and r.created_at >= start
                and (end is None or r.created_at < end)
                and (type is None or r.type == type)
            ]
        return sorted(out, key=lambda r: r.created_at, reverse=True)

    def add_payment(self, payment: Payment) -> Payment:
        with self._lock:
            self.payments.append(payment)
        return payment

    # ---------- community ----------
    def add_post(self, user_id: str, **fields: Any) -> Post:
        post = Post(id=new_id(), user_id=user_id, **fields)
        with self._lock:
            self.posts[post.id] = post
        return post

    def get_post(self, post_id: str) -> Optional[Post]:
        return self.posts.get(post_id)

    def delete_post(self, post_id: str) -> None:
        with self._lock:
            self.posts.pop(post_id, None)
            self.comments = [c for c in self.comments if c.post_id != post_id]
            self.likes = {lk for lk in self.likes if lk[1] != post_id}

    def like_count(self, post_id: str) -> int:
        return sum(1 for _, pid in self.likes if pid == post_id)

    def comment_count(self, post_id: str) -> int:
        return sum(1 for c in self.comments if c.post_id == post_id)

    def toggle_like(self, user_id: str, post_id: str) -> bool:
        key = (user_id, post_id)
        with self._lock:
            if key in self.likes:
                self.likes.discard(key)
                return False
            self.likes.add(key)
            return True

    def has_liked(self, user_id: str, post_id: str) -> bool:
        return (user_id, post_id) in self.likes

    def add_comment(self, post_id: str, user_id: str, content: str) -> Comment:
        c = Comment(id=new_id(), post_id=post_id, user_id=user_id, content=content)
        with self._lock:
            self.comments.append(c)
        return c

    def comments_for(self, post_id: str) -> List[Comment]:
        with self._lock:
            out = [c for c in self.comments if c.post_id == post_id]
        return sorted(out, key=lambda c: c.created_at, reverse=True)

    # ---------- follows ----------
    def toggle_follow(self, follower_id: str, following_id: str) -> bool:
        key = (follower_id, following_id)
        with self._lock:
            if key in self.follows:
                self.follows.discard(key)
                return False
            self.follows.add(key)
            return True

    def is_following(self, follower_id: str, following_id: str) -> bool:
        return (follower_id, following_id) in self.follows

    def follower_count(self, user_id: str) -> int:
        return sum(1 for _, f in self.follows if f == user_id)

    def following_count(self, user_id: str) -> int:
        return sum(1 for f, _ in self.follows if f == user_id)


store = Store()


def period_end(start: datetime, billing_cycle: str) -> datetime:
    return start + timedelta(days=365 if billing_cycle == "yearly" else 30)
