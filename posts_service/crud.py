from sqlalchemy import select, delete
from .models import AsyncSessionLocal
from .models.posts import Post
from .models.comments import Comment
from .store import coerce_id, usable_filters


class SqlPostStore:
    """PostStore over the posts/comments tables."""

    def __init__(self, session_factory=None):
        self._sessions = session_factory or AsyncSessionLocal

    async def find(self, filters=None):
        q = select(Post)
        for key, value in usable_filters(filters).items():
            if key == 'id':
                value = coerce_id(value)
                if value is None:
                    return []
            q = q.where(getattr(Post, key) == value)
        async with self._sessions() as session:
            res = await session.execute(q.order_by(Post.id.asc()))
            return res.scalars().all()

    async def find_by_id(self, post_id):
        pid = coerce_id(post_id)
        if pid is None:
            return None
        async with self._sessions() as session:
            q = await session.execute(select(Post).where(Post.id == pid))
            return q.scalars().first()

    async def find_post_comments(self, post_id):
        pid = coerce_id(post_id)
        if pid is None:
            return None
        async with self._sessions() as session:
            q = await session.execute(select(Post.id).where(Post.id == pid))
            if q.scalars().first() is None:
                return None
            res = await session.execute(
                select(Comment).where(Comment.post_id == pid).order_by(Comment.id.asc())
            )
            return res.scalars().all()

    async def insert(self, post):
        async with self._sessions() as session:
            p = Post(title=post['title'], contents=post['contents'])
            session.add(p)
            await session.commit()
            await session.refresh(p)
            return p

    async def insert_comment(self, comment):
        pid = coerce_id(comment.get('post_id'))
        if pid is None:
            raise ValueError(f'invalid post id {comment.get("post_id")!r}')
        async with self._sessions() as session:
            c = Comment(text=comment['text'], post_id=pid)
            session.add(c)
            await session.commit()
            await session.refresh(c)
            return c

    async def update(self, post_id, fields):
        pid = coerce_id(post_id)
        if pid is None:
            return None
        async with self._sessions() as session:
            q = await session.execute(select(Post).where(Post.id == pid))
            post = q.scalars().first()
            if not post:
                return None
            for key in ('title', 'contents'):
                if key in fields:
                    setattr(post, key, fields[key])
            await session.commit()
            # pick up the server-side updated_at
            await session.refresh(post)
            return post

    async def remove(self, post_id):
        pid = coerce_id(post_id)
        if pid is None:
            return None
        async with self._sessions() as session:
            q = await session.execute(select(Post).where(Post.id == pid))
            post = q.scalars().first()
            if not post:
                return None
            # sqlite does not enforce the cascade unless foreign keys are switched on
            await session.execute(delete(Comment).where(Comment.post_id == pid))
            await session.delete(post)
            await session.commit()
            return post
