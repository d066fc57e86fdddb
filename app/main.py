"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import router as v1_router
from app.core.config import APP_NAME, APP_VERSION, settings
from app.core.exceptions import AppError, UnauthorizedError
from app.core.logging import configure_logging
from app.schemas.common import ApiResponse, ValidationErrorData, ValidationIssue

configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _envelope(
    status_code: int,
    message: str,
    data: object = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ApiResponse[object](status_code=status_code, message=message, data=data)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True)),
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return _envelope(exc.status_code, exc.message, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures are 400s with one entry per offending field."""
    issues = [
        ValidationIssue(
            # Drop the leading "body"/"query"/"path" location segment.
            path=".".join(str(part) for part in err.get("loc", ())[1:]),
            message=err.get("msg", "Invalid value"),
        )
        for err in exc.errors()
    ]
    return _envelope(
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        data=ValidationErrorData(errors=issues).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/", response_model=ApiResponse[None])
def root() -> ApiResponse[None]:
    """Root route; minimal payload for discovery."""
    return ApiResponse(message=APP_NAME)
