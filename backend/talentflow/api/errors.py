"""Map domain errors onto HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from talentflow.core.errors import DuplicateKey, InvalidQuery, NotFound
from talentflow.core.logging import get_logger

logger = get_logger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.exception_handler(DuplicateKey)
    async def duplicate_key_handler(request: Request, exc: DuplicateKey):
        logger.warning("conflict on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc)},
        )

    @app.exception_handler(InvalidQuery)
    async def invalid_query_handler(request: Request, exc: InvalidQuery):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )
