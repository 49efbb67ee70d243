from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.auth.routes import auth_router
from app.inventory.routes import inventory_router
from app.logger import logger
from app.player.routes import player_router
from app.settings import settings
from app.squad.exceptions import SquadServiceError
from app.squad.routes import squad_router
from app.utils.db import create_db_and_tables
from app.utils.responses import ResponseSchema


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    if settings.SEED_ON_STARTUP:
        from app.scripts.seed_db import main as seed_main
        seed_main()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Squad and lineup management API",
    version=settings.VERSION,
    root_path=settings.ROOT_PATH,
    docs_url="/docs",
    openapi_url="/openapi.json",
    redoc_url="/redoc",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Optional middlewares
if settings.ENABLE_GZIP:
    app.add_middleware(GZipMiddleware, minimum_size=1000)

if settings.allowed_hosts and settings.allowed_hosts != ["*"]:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

if settings.USE_PROXY_HEADERS:
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

if settings.ENABLE_HTTPS_REDIRECT:
    app.add_middleware(HTTPSRedirectMiddleware)


router = APIRouter()


@router.get("/healthz")
def healthz():
    """
    Public health check endpoint.
    """
    return {"status": "ok"}


app.include_router(router, prefix="")
app.include_router(auth_router, prefix=f"{settings.API_V1_PREFIX}/auth")
app.include_router(inventory_router, prefix=f"{settings.API_V1_PREFIX}")
app.include_router(player_router, prefix=f"{settings.API_V1_PREFIX}")
app.include_router(squad_router, prefix=f"{settings.API_V1_PREFIX}")


# Structured error handling
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Validation error on {request.method} {request.url}: {exc.errors()}"
    )
    return ResponseSchema.error(
        message="Validation error",
        status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        error="INVALID_INPUT",
        meta={"detail": jsonable_errors(exc)},
    )


@app.exception_handler(SquadServiceError)
async def squad_exception_handler(request: Request, exc: SquadServiceError):
    logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return ResponseSchema.error(
        message=exc.message, status_code=exc.status_code, error=exc.code
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"HTTPException on {request.method} {request.url}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status_code": exc.status_code,
            "message": exc.detail if isinstance(exc.detail, str) else "HTTP error",
            "error": exc.__class__.__name__,
        },
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Full detail stays in the logs; clients only see a generic failure
    logger.exception(f"Unhandled error on {request.method} {request.url}: {exc!s}")
    return ResponseSchema.error(
        message="Internal server error", status_code=500, error="INTERNAL_ERROR"
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = str(request.url.path)
        logger.bind(path=path, method=request.method).info("Request started")
        response: Response = await call_next(request)
        logger.bind(path=path, status_code=response.status_code).info(
            "Request completed"
        )
        return response


app.add_middleware(RequestLoggingMiddleware)
