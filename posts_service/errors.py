"""
API error types and the handlers that render them as JSON.

Every error carries its HTTP status and the exact body clients receive.
Validation problems and missing posts are expected outcomes; only store
failures and unhandled exceptions are logged as errors.
"""
import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

logger = logging.getLogger(__name__)

POST_NOT_FOUND = "The post with the specified ID does not exist."
POST_FIELDS_REQUIRED = "Please provide title and contents for the post."
COMMENT_TEXT_REQUIRED = "Please provide text for the comment."

POSTS_RETRIEVE_FAILED = "The posts' information couldn't be retrieved..."
POST_RETRIEVE_FAILED = "The post information could not be retrieved."
COMMENTS_RETRIEVE_FAILED = "The comments information could not be retrieved."
POST_SAVE_FAILED = "There was an error while saving the post to the database"
COMMENT_SAVE_FAILED = "There was an error while saving the comment to the database"
POST_UPDATE_FAILED = "The post information could not be modified."
POST_REMOVE_FAILED = "The post could not be removed"

UNEXPECTED_ERROR = "An unexpected error occurred"


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {'error': self.message}


class PostNotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self):
        super().__init__(POST_NOT_FOUND)

    def to_response(self) -> dict:
        return {'message': self.message}


class InvalidPayload(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST

    def to_response(self) -> dict:
        return {'errorMessage': self.message}


class StoreFailure(ApiError):
    """A store call raised; message is the route's fixed 500 text."""


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # unparsable or mistyped bodies get the same answer as missing fields
        logger.warning({'msg': 'invalid_body', 'path': request.url.path, 'errors': str(exc.errors())})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=InvalidPayload(_validation_message(request.url.path)).to_response(),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error({'msg': 'unhandled_exception', 'path': request.url.path, 'error': str(exc)}, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={'error': UNEXPECTED_ERROR},
        )


def _validation_message(path: str) -> str:
    if path.rstrip('/').endswith('/comments'):
        return COMMENT_TEXT_REQUIRED
    return POST_FIELDS_REQUIRED
