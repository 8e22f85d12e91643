"""
PostStore contract and the in-memory implementation.

Stores are async and signal absence with ``None``; any exception they raise
is treated by the routes as a store failure. ``find_post_comments`` returns
``None`` only when the post itself is missing, and an empty list when the
post exists without comments.
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

# query keys a listing can filter on; anything else is ignored
FILTERABLE_FIELDS = ('id', 'title', 'contents')


class PostStore(Protocol):
    async def find(self, filters: Optional[Dict[str, Any]] = None) -> List[Any]: ...
    async def find_by_id(self, post_id: Any) -> Optional[Any]: ...
    async def find_post_comments(self, post_id: Any) -> Optional[List[Any]]: ...
    async def insert(self, post: Dict[str, Any]) -> Any: ...
    async def insert_comment(self, comment: Dict[str, Any]) -> Any: ...
    async def update(self, post_id: Any, fields: Dict[str, Any]) -> Optional[Any]: ...
    async def remove(self, post_id: Any) -> Optional[Any]: ...


def coerce_id(value: Any) -> Optional[int]:
    """Return an integer id, or None when the value can't name a record."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def usable_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in (filters or {}).items() if k in FILTERABLE_FIELDS}


class MemoryPostStore:
    """Dict-backed store for local runs and tests."""

    def __init__(self):
        self._posts: Dict[int, dict] = {}
        self._comments: Dict[int, dict] = {}
        self._next_post_id = 1
        self._next_comment_id = 1
        self._lock = asyncio.Lock()

    @staticmethod
    def _now():
        return datetime.now(timezone.utc)

    async def find(self, filters=None):
        wanted = usable_filters(filters)
        if 'id' in wanted:
            wanted['id'] = coerce_id(wanted['id'])
        return [dict(p) for p in self._posts.values()
                if all(p[k] == v for k, v in wanted.items())]

    async def find_by_id(self, post_id):
        post = self._posts.get(coerce_id(post_id))
        return dict(post) if post else None

    async def find_post_comments(self, post_id):
        pid = coerce_id(post_id)
        if pid not in self._posts:
            return None
        return [dict(c) for c in self._comments.values() if c['post_id'] == pid]

    async def insert(self, post):
        async with self._lock:
            now = self._now()
            record = {
                'id': self._next_post_id,
                'title': post['title'],
                'contents': post['contents'],
                'created_at': now,
                'updated_at': now,
            }
            self._posts[record['id']] = record
            self._next_post_id += 1
            return dict(record)

    async def insert_comment(self, comment):
        async with self._lock:
            pid = coerce_id(comment.get('post_id'))
            if pid not in self._posts:
                raise ValueError(f'post {comment.get("post_id")!r} does not exist')
            now = self._now()
            record = {
                'id': self._next_comment_id,
                'text': comment['text'],
                'post_id': pid,
                'created_at': now,
                'updated_at': now,
            }
            self._comments[record['id']] = record
            self._next_comment_id += 1
            return dict(record)

    async def update(self, post_id, fields):
        async with self._lock:
            post = self._posts.get(coerce_id(post_id))
            if not post:
                return None
            for key in ('title', 'contents'):
                if key in fields:
                    post[key] = fields[key]
            post['updated_at'] = self._now()
            return dict(post)

    async def remove(self, post_id):
        async with self._lock:
            post = self._posts.pop(coerce_id(post_id), None)
            if not post:
                return None
            for cid in [cid for cid, c in self._comments.items() if c['post_id'] == post['id']]:
                del self._comments[cid]
            return dict(post)
