from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from contextlib import asynccontextmanager
import time

from routers import include_routers
from logging_config import get_colorful_logger
from auth.config import _init_config
from auth.middleware import RouteGuardMiddleware
from config import config_manager

logger = get_colorful_logger(
    __name__,
    level=config_manager.log_level(),
    rich=bool(config_manager.get("log_rich", True)),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """App lifespan"""
    logger.info("Initialising auth config...")
    _init_config()
    logger.info("Auth config ready")
    yield


app = include_routers(FastAPI(lifespan=lifespan))


async def log_requests(request: Request, call_next):
    start_time = time.time()
    logger.info(f"Request: {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"Response: {response.status_code} ({process_time:.3f}s)")
    return response


# Starlette runs the last added middleware first: CORS -> guards -> request log
app.add_middleware(BaseHTTPMiddleware, dispatch=log_requests)
app.add_middleware(RouteGuardMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config_manager.get("cors", ["*"])),  # type: ignore
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=config_manager.get("host", "0.0.0.0"), port=int(config_manager.get("port", 3000)))
