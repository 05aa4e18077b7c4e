import logging
from collections.abc import Sequence

import uvicorn
from fastapi import APIRouter, FastAPI

from innokit.api.exception_handlers import ErrorMiddleware, register_exception_handlers
from innokit.api.middleware import JwtAuthStage, Stage, StageMiddleware
from innokit.core.config import Settings
from innokit.core.logging import configure_logging

logger = logging.getLogger(__name__)


class App:
    """
    Assemble a FastAPI application from settings and a router.

    Layers, outermost first: ErrorMiddleware, the stage pipeline (JWT auth
    when ``settings.jwt_secret`` is set, then ``stages``), routing.
    """

    def __init__(self, settings: Settings, router: APIRouter, stages: Sequence[Stage] = ()) -> None:
        self.settings = settings
        self.stages = [*self._auth_stages(settings), *stages]
        self.api = self._build(router)

    @staticmethod
    def _auth_stages(settings: Settings) -> list[Stage]:
        if not settings.auth_enabled:
            return []
        return [JwtAuthStage(settings.jwt_secret, settings.jwt_public_path, settings.jwt_algorithm)]

    def _build(self, router: APIRouter) -> FastAPI:
        api = FastAPI()

        @api.get("/health")
        def health():
            return {"status": "ok"}

        register_exception_handlers(api)
        api.include_router(router)
        # Added last so it wraps every other layer.
        api.add_middleware(StageMiddleware, stages=self.stages)
        api.add_middleware(ErrorMiddleware)
        return api

    def listen(self) -> None:
        """Serve the application on ``settings.port``."""
        configure_logging(self.settings.log_level)
        logger.info("Listening on port %d (auth %s)", self.settings.port,
                    "enabled" if self.settings.auth_enabled else "disabled")
        uvicorn.run(self.api, host="0.0.0.0", port=self.settings.port, log_config=None)
