"""FastAPI application factory."""

import hmac
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status

from food_search.api.models import FoodSearchRequest
from food_search.app_logging import configure_logging
from food_search.containers import AppContainer
from food_search.services.ranking import split_recent
from food_search.services.search import InvalidSearchRequest


def _get_service_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.service_token


async def resolve_user_id(
    x_user_id: str | None = Header(default=None),
    x_service_token: str | None = Header(default=None),
    service_token: str | None = Depends(_get_service_token),
) -> str | None:
    """Return the caller's user id, only when a valid service token vouches for it."""
    if not x_user_id:
        return None
    if (
        not service_token
        or not x_service_token
        or not hmac.compare_digest(x_service_token, service_token)
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_user_id


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/food/search")
    async def food_search(
        payload: FoodSearchRequest,
        request: Request,
        user_id: str | None = Depends(resolve_user_id),
    ) -> dict[str, object]:
        """Search every food source and return ranked, grouped results."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        limit = min(payload.limit or settings.default_limit, settings.max_limit)
        try:
            outcome = await state_container.search_service.run(
                payload.query,
                limit,
                user_id=user_id,
                include_recent=payload.include_recent,
            )
        except InvalidSearchRequest as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc

        recent, database = split_recent(
            outcome.results, max_recent=settings.max_recent_results
        )
        logger.info(
            "Food search response: recent=%s database=%s sources=%s",
            len(recent),
            len(database[:limit]),
            ",".join(outcome.sources),
        )
        return {
            "ok": True,
            "results": {
                "recent": recent if payload.include_recent else [],
                "database": database[:limit],
            },
            "sources": outcome.sources,
        }

    return app
