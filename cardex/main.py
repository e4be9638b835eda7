import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cardex.api import (
    binders_router,
    cards_router,
    expansions_router,
    health_router,
    marketplace_router,
    stats_router,
    wishlist_router,
)
from cardex.clients.cardtrader import CardTraderClient
from cardex.clients.pokemon_tcg import PokemonTCGClient
from cardex.config import settings
from cardex.db.database import Database
from cardex.models.failure import ApiResponse, FailureKind, KnownError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    database = Database(settings.database_url, echo=settings.debug)
    await database.init()

    app.state.database = database
    app.state.catalog = PokemonTCGClient(
        settings.pokemon_tcg_api_url,
        api_key=settings.pokemon_tcg_api_key,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
        max_concurrency=settings.max_concurrent_requests,
    )
    app.state.marketplace = CardTraderClient(
        settings.cardtrader_api_url,
        token=settings.cardtrader_api_token,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
        max_concurrency=settings.max_concurrent_requests,
    )
    logger.info("%s started", settings.app_name)

    try:
        yield
    finally:
        await app.state.catalog.aclose()
        await app.state.marketplace.aclose()
        await database.dispose()
        logger.info("%s stopped", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cardex"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
    logger.info(
        "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.kind.value
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in errors
    )
    response = ApiResponse.known_failure(
        kind=FailureKind.INVALID_INPUT,
        message="The request is malformed",
        detail=detail or None,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=response.model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unknown_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ApiResponse.unknown_failure(exc).model_dump(mode="json"),
    )


app.include_router(binders_router)
app.include_router(cards_router)
app.include_router(expansions_router)
app.include_router(health_router)
app.include_router(marketplace_router)
app.include_router(stats_router)
app.include_router(wishlist_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
