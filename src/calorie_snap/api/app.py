"""FastAPI application factory."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calorie_snap.api.models import AnalyzeRequest
from calorie_snap.app_logging import configure_logging
from calorie_snap.containers import AppContainer
from calorie_snap.domain.errors import ErrorCategory, GatewayError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    started_at = time.monotonic()
    if not container.settings.api_key_configured:
        logger.warning("Provider API key is not configured; analyze will fail")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="calorie-snap", lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(
        request: Request, exc: GatewayError
    ) -> JSONResponse:
        """Render gateway failures as ``{success: false, error}``."""
        state_container: AppContainer = request.app.state.container
        return _error_response(exc, state_container.settings.is_production)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Treat malformed request bodies as invalid input."""
        state_container: AppContainer = request.app.state.container
        logger.info("Rejected malformed analyze request: %s", exc.errors())
        error = GatewayError(
            ErrorCategory.INVALID_INPUT,
            "Invalid request body; please upload a valid food image.",
            status_code=400,
            debug=str(exc.errors()),
        )
        return _error_response(error, state_container.settings.is_production)

    @app.get("/api/health")
    async def health(request: Request) -> dict[str, object]:
        """Report uptime and provider configuration."""
        state_container: AppContainer = request.app.state.container
        return {
            "status": "ok",
            "timestamp": _now_iso(),
            "uptime": round(time.monotonic() - started_at, 3),
            "apiKeyConfigured": state_container.settings.api_key_configured,
            "aiClientInitialized": state_container.gateway.client_initialized,
        }

    async def analyze(payload: AnalyzeRequest, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        try:
            record = await state_container.gateway.analyze(
                payload.image, food_name_hint=payload.food_name
            )
        except GatewayError:
            raise
        except Exception as exc:
            logger.exception("Food recognition failed")
            raise GatewayError(
                ErrorCategory.INTERNAL,
                "Internal server error; please retry later.",
                debug=str(exc),
            ) from exc
        return {
            "success": True,
            "data": record.model_dump(mode="json"),
            "timestamp": _now_iso(),
        }

    app.add_api_route(
        "/api/image/analyze",
        analyze,
        methods=["POST"],
        summary="Recognize the food in an image",
    )
    app.add_api_route(
        "/api/recognize-food",
        analyze,
        methods=["POST"],
        summary="Compatibility alias for /api/image/analyze",
    )

    return app


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def _error_response(exc: GatewayError, is_production: bool) -> JSONResponse:
    body: dict[str, object] = {
        "success": False,
        "error": exc.message,
        "category": str(exc.category),
        "timestamp": _now_iso(),
    }
    if exc.debug and not is_production:
        body["debug"] = exc.debug
    return JSONResponse(status_code=exc.status_code, content=body)
