"""HTTP surface: three endpoints that expose which lifetime built each provider."""

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from ._container import Container, RequestContext, ResolutionError
from .config import Settings, get_settings
from .identifiers import IdentifierSource, create_identifier_source
from .services import FirstConsumer, SecondConsumer, register_services


logger = logging.getLogger(__name__)


def create_container(settings: Settings) -> Container:
    container = Container()
    container.register_instance(IdentifierSource, create_identifier_source(settings.identifier_kind))
    register_services(container, consumer_lifetime=settings.consumer_lifetime)
    return container


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_request_context(container: Annotated[Container, Depends(get_container)]) -> Iterator[RequestContext]:
    """Open one request context per inbound call; it is closed once the response is produced."""
    with container.create_context() as context:
        yield context


RequestContextDep = Annotated[RequestContext, Depends(get_request_context)]

router = APIRouter(tags=["lifetimes"])


def _resolve_consumers(context: RequestContext) -> tuple[FirstConsumer, SecondConsumer]:
    return context.resolve(FirstConsumer), context.resolve(SecondConsumer)


@router.get("/singleton", status_code=status.HTTP_200_OK)
def get_singleton_pair(context: RequestContextDep) -> list[str]:
    """Both ids are equal, and equal across calls."""
    first, second = _resolve_consumers(context)
    return [first.singleton_id(), second.singleton_id()]


@router.get("/request", status_code=status.HTTP_200_OK)
def get_request_pair(context: RequestContextDep) -> list[str]:
    """Both ids are equal within a call and change on the next call."""
    first, second = _resolve_consumers(context)
    return [first.request_id(), second.request_id()]


@router.get("/transient", status_code=status.HTTP_200_OK)
def get_transient_pair(context: RequestContextDep) -> list[str]:
    """Every id is new."""
    first, second = _resolve_consumers(context)
    return [first.transient_id(), second.transient_id()]


async def resolution_error_handler(request: Request, exc: ResolutionError) -> JSONResponse:
    logger.error("Resolution failed for %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build singletons before serving; a failure here aborts startup."""
    logger.info("Starting %s", app.title)
    app.state.container.initialize()
    logger.info("%s ready", app.title)

    yield

    logger.info("%s stopped", app.title)


def create_app(settings: Settings | None = None, container: Container | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Dependency-injection lifetime demo",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.container = container or create_container(settings)

    app.add_exception_handler(ResolutionError, resolution_error_handler)
    app.include_router(router)

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app
