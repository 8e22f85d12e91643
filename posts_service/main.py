import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from .routes import router
from .core import init_metrics, db_startup, shutdown_connections, observe_request
from .config import API_PREFIX, CORS_ORIGINS, LOG_LEVEL, METRICS_ENABLED, STORE_BACKEND
from .errors import register_error_handlers
import logging
from pythonjsonlogger import jsonlogger

# setup structured logging
logger = logging.getLogger('posts_service')
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(LOG_LEVEL)

app = FastAPI(title="Posts API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_error_handlers(app)

app.include_router(router, prefix=API_PREFIX)

@app.get('/healthz')
async def healthz():
    return {'status': 'ok'}

@app.middleware('http')
async def log_requests(request: Request, call_next):
    logger.info({'msg':'request_start','method':request.method,'path':request.url.path})
    started = time.perf_counter()
    # an exception escaping call_next ends up as a 500 from the catch-all handler
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        route = request.scope.get('route')
        observe_request(request.method, getattr(route, 'path', 'unmatched'),
                        status_code, time.perf_counter() - started)
        logger.info({'msg':'request_end','path':request.url.path,'status': status_code})

@app.on_event("startup")
async def startup():
    # Best-effort init, don't block app from starting if a dependency fails
    if METRICS_ENABLED:
        try:
            init_metrics()
        except Exception as e:
            logger.warning({'msg': 'metrics_init_failed', 'error': str(e)})
    if STORE_BACKEND == 'sql':
        try:
            await db_startup()
        except Exception as e:
            logger.warning({'msg': 'db_init_failed', 'error': str(e)})

@app.on_event("shutdown")
async def shutdown():
    await shutdown_connections()
