from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from ..config import DATABASE_URL


def make_engine(url: str):
    if url.startswith('sqlite'):
        # a single shared connection keeps in-memory databases alive across sessions
        return create_async_engine(url, future=True, echo=False,
                                   connect_args={'check_same_thread': False},
                                   poolclass=StaticPool)
    return create_async_engine(url, future=True, echo=False)


def make_sessionmaker(bind):
    return sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine(DATABASE_URL)
AsyncSessionLocal = make_sessionmaker(engine)
Base = declarative_base()

# Import models to register tables
from .posts import Post  # noqa: F401,E402
from .comments import Comment  # noqa: F401,E402
