"""
FastAPI Backend for SAILROUTE Minimum-Time Sailing Router.

Provides REST API endpoints for:
- Minimum-time routing over time-varying wind and current grids
- The bundled reference crossing
- Vessel polar inspection
- Search metrics

Version: 0.1.0
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

# Import SAILROUTE modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sailroute import __version__
from sailroute.metrics import get_metrics
from api.config import settings
from api.routers.routing import router as routing_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """
    Application factory for SAILROUTE API.

    Returns:
        FastAPI: Configured application instance
    """
    application = FastAPI(
        title="SAILROUTE API",
        description="""
## Minimum-Time Sailing Route API

Finds the fastest grid route for a sailing vessel through wind and
current fields that change over time.

### Features
- Time-dependent frontier search with exact or dominance pruning
- Polar-table vessel performance with current vector correction
- Nearest-grid-point mapping of start and finish positions
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # CORS middleware - use configured origins only
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    application.include_router(routing_router)

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})

    @application.get("/", tags=["System"])
    async def root():
        """
        API root endpoint.

        Returns basic API information and available endpoint categories.
        """
        return {
            "name": "SAILROUTE API",
            "version": __version__,
            "status": "operational",
            "docs": "/api/docs",
            "endpoints": {
                "health": "/api/health",
                "metrics": "/api/metrics/json",
                "routing": "/api/routing/...",
            }
        }

    @application.get("/api/health", tags=["System"])
    async def health_check():
        """Liveness check for load balancers."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "environment": settings.environment,
        }

    @application.get("/api/metrics/json", tags=["System"])
    async def get_metrics_json():
        """
        Search metrics in JSON format.

        Timings of minimum-time searches, expanded path counters and the
        peak frontier size.
        """
        return get_metrics().get_summary()

    return application


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with exception contexts reduced to strings."""
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(err)
    return errors


# Create the application
app = create_app()


# ============================================================================
# Run Server
# ============================================================================

if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
