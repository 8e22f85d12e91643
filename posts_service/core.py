from prometheus_client import Counter, Histogram, start_http_server
import logging
from .config import METRICS_PORT
from .models import Base, engine

logger = logging.getLogger(__name__)

REQUESTS = Counter(
    'posts_http_requests_total',
    'HTTP requests handled',
    ['method', 'route', 'status'],
)
REQUEST_SECONDS = Histogram(
    'posts_http_request_seconds',
    'HTTP request latency',
    ['method', 'route'],
)

def init_metrics(port: int = METRICS_PORT):
    """Initialize Prometheus metrics server"""
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server started on port {port}")
    except Exception as e:
        logger.warning(f'Prometheus start failed: {e}')

def observe_request(method: str, route: str, status: int, seconds: float):
    REQUESTS.labels(method=method, route=route, status=str(status)).inc()
    REQUEST_SECONDS.labels(method=method, route=route).observe(seconds)

async def db_startup(bind=None):
    """Create the posts/comments tables if they are missing"""
    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

async def shutdown_connections(bind=None):
    """Gracefully shutdown all connections"""
    logger.info("Shutting down connections...")
    bind = bind or engine
    try:
        await bind.dispose()
        logger.info("Database engine disposed")
    except Exception as e:
        logger.error(f"Error disposing database engine: {e}")
