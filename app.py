from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend import RedisBackend
from constants import LOG_LEVEL, LOG_FILE
from dependencies import close_session_service, get_redis_backend
from errors import SessionError
from routers.sessions import sessions_router
from logging_config import get_logger, setup_logging

setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_session_service()


app = FastAPI(title="Live Session Service", lifespan=lifespan)

# Configure CORS to allow all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions_router)


@app.exception_handler(SessionError)
async def session_error_handler(request: Request, exc: SessionError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.error}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
def health(backend: RedisBackend = Depends(get_redis_backend)):
    redis_ok = backend.ping()
    status_code = 200 if redis_ok else 503
    return JSONResponse(status_code=status_code, content={"status": "ok" if redis_ok else "degraded", "redis": redis_ok})


logger.info("FastAPI application initialized")
