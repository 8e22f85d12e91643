from contextlib import asynccontextmanager
from fastapi import APIRouter, Depends, Request, status
from typing import List, Optional
import logging
from pydantic import ValidationError
from ..schemas.posts import PostIn, PostOut, CommentIn, CommentOut, MessageOut
from ..store import PostStore
from ..deps import get_store
from ..errors import (
    ApiError,
    PostNotFound,
    InvalidPayload,
    StoreFailure,
    POST_FIELDS_REQUIRED,
    COMMENT_TEXT_REQUIRED,
    POSTS_RETRIEVE_FAILED,
    POST_RETRIEVE_FAILED,
    COMMENTS_RETRIEVE_FAILED,
    POST_SAVE_FAILED,
    COMMENT_SAVE_FAILED,
    POST_UPDATE_FAILED,
    POST_REMOVE_FAILED,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@asynccontextmanager
async def store_errors(message: str):
    """Turn anything a store call raises into the route's 500 answer."""
    try:
        yield
    except ApiError:
        raise
    except Exception as e:
        logger.error({'msg': 'store_call_failed', 'reason': message, 'error': repr(e)})
        raise StoreFailure(message) from e


def require_post_fields(payload: PostIn):
    if not payload.title or not payload.contents:
        raise InvalidPayload(POST_FIELDS_REQUIRED)


async def read_comment(request: Request) -> Optional[CommentIn]:
    """Parse the comment body; None when it is absent or not a comment object."""
    try:
        return CommentIn.model_validate(await request.json())
    except (ValueError, ValidationError):
        return None


@router.get('', response_model=List[PostOut])
@router.get('/', response_model=List[PostOut], include_in_schema=False)
async def list_posts(request: Request, store: PostStore = Depends(get_store)):
    async with store_errors(POSTS_RETRIEVE_FAILED):
        return await store.find(dict(request.query_params))


@router.get('/{post_id}', response_model=PostOut)
async def get_post(post_id: str, store: PostStore = Depends(get_store)):
    async with store_errors(POST_RETRIEVE_FAILED):
        post = await store.find_by_id(post_id)
    if not post:
        raise PostNotFound()
    return post


@router.get('/{post_id}/comments', response_model=List[CommentOut])
async def list_comments(post_id: str, store: PostStore = Depends(get_store)):
    async with store_errors(COMMENTS_RETRIEVE_FAILED):
        comments = await store.find_post_comments(post_id)
    # an empty list means the post exists without comments
    if comments is None:
        raise PostNotFound()
    return comments


@router.post('', response_model=PostOut, status_code=status.HTTP_201_CREATED)
@router.post('/', response_model=PostOut, status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_post(payload: PostIn, store: PostStore = Depends(get_store)):
    require_post_fields(payload)
    async with store_errors(POST_SAVE_FAILED):
        return await store.insert({'title': payload.title, 'contents': payload.contents})


@router.post('/{post_id}/comments', response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def create_comment(post_id: str, request: Request, store: PostStore = Depends(get_store)):
    # the body is only read once the post is known to exist
    async with store_errors(COMMENT_SAVE_FAILED):
        post = await store.find_by_id(post_id)
        if not post:
            raise PostNotFound()
        payload = await read_comment(request)
        if not payload or not payload.text:
            raise InvalidPayload(COMMENT_TEXT_REQUIRED)
        return await store.insert_comment({'text': payload.text, 'post_id': post_id})


@router.put('/{post_id}', response_model=PostOut)
async def update_post(post_id: str, payload: PostIn, store: PostStore = Depends(get_store)):
    require_post_fields(payload)
    async with store_errors(POST_UPDATE_FAILED):
        post = await store.update(post_id, {'title': payload.title, 'contents': payload.contents})
    if not post:
        raise PostNotFound()
    return post


@router.delete('/{post_id}', response_model=MessageOut)
async def delete_post(post_id: str, store: PostStore = Depends(get_store)):
    async with store_errors(POST_REMOVE_FAILED):
        post = await store.remove(post_id)
    if not post:
        raise PostNotFound()
    return {'message': f'Deleted post with id {post_id}'}
