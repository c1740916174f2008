from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from shelterhub.core import config
from shelterhub.core.database.engine import init_db
from shelterhub.core.errors import ShelterHubError, StoreFailure
from shelterhub.features.users.routes import router as user_router
from shelterhub.features.shelters.routes import router as shelter_router
from shelterhub.features.animals.routes import router as animal_router
from shelterhub.features.tasks.routes import router as task_router
from shelterhub.features.stats.routes import router as stats_router
from shelterhub.features.users.dependencies import get_authorization_header
from shelterhub.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="ShelterHub Backend",
    description="Animal shelter management API with shelter-scoped permissions",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
limiter = Limiter(key_func=get_authorization_header, default_limits=[config.RATE_LIMIT])
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.shelterhub.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(ShelterHubError)
async def shelterhub_error_handler(request: Request, exc: ShelterHubError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        log.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    log.exception("Unhandled storage error on %s %s", request.method, request.url.path)
    failure = StoreFailure()
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"error": "You are going too fast"}, status_code=429)


@app.on_event("startup")
async def startup():
    """Initialize database on application startup."""
    log.info("Initializing database...")
    await init_db()
    log.info("Database initialized successfully")


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "ShelterHub API",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "authentication": {
            "info": "Protected endpoints require Bearer token in Authorization header",
            "public_endpoints": [
                "/users", "/users/{id}", "/shelters", "/shelters/{id}",
                "/animals", "/animals/{id}", "/stats/general"
            ],
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
app.include_router(user_router, prefix="/users", tags=["users"])
app.include_router(shelter_router, prefix="/shelters", tags=["shelters"])
app.include_router(animal_router, prefix="/animals", tags=["animals"])
app.include_router(task_router, prefix="/tasks", tags=["tasks"])
app.include_router(stats_router, prefix="/stats", tags=["stats"])
