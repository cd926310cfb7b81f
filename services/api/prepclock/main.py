# PrepClock API Main Entry Point
import logging
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ApiError
from .limits import limiter
from .settings import settings
from .routers.ready import router as ready_router
from .routers.meals import router as meals_router
from .routers.recipes import router as recipes_router
from .routers.notes import router as notes_router
from .routers.sessions import router as sessions_router
from .routers.dev import router as dev_router

# Configure structured logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("prepclock")

app = FastAPI(title="PrepClock API", version="0.1.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=400, content={"error": "Invalid request"})
    first = errors[0]
    # Drop the "body"/"query" prefix so the client sees just the field path
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(meals_router, prefix="/api", tags=["meals"])
app.include_router(recipes_router, prefix="/api", tags=["recipes"])
app.include_router(notes_router, prefix="/api", tags=["notes"])
app.include_router(sessions_router, prefix="/api", tags=["sessions"])
app.include_router(dev_router, prefix="/api", tags=["dev"])
