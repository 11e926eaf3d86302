"""
SAILROUTE API Pydantic schemas.

Re-exports all schema classes:
    from api.schemas import Position, MinimumTimeRequest, ...
"""

# Common
from .common import GridCellModel, Position  # noqa: F401

# Routing
from .routing import (  # noqa: F401
    GridSpecModel,
    MinimumTimeRequest,
    MinimumTimeResponse,
    PolarSummaryResponse,
    ReferenceRouteRequest,
    SurfaceSliceModel,
)
