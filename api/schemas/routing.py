"""Minimum-time routing API schemas."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .common import GridCellModel, Position


class GridSpecModel(BaseModel):
    """Regular lat/lon grid; row index follows latitude, column follows longitude."""
    lat_origin: float = Field(..., ge=-90, le=90, description="Latitude of row 0")
    lon_origin: float = Field(..., ge=-180, le=180, description="Longitude of column 0")
    spacing_deg: float = Field(..., gt=0, le=5.0, description="Grid spacing in degrees")
    rows: int = Field(..., ge=1, le=500)
    cols: int = Field(..., ge=1, le=500)


class SurfaceSliceModel(BaseModel):
    """Wind and current over the grid for one time interval (rows x cols arrays)."""
    wind_deg: List[List[float]] = Field(..., description="Direction the wind blows from, degrees")
    wind_kts: List[List[float]]
    current_deg: List[List[float]] = Field(..., description="Direction the current sets to, degrees")
    current_kts: List[List[float]]

    @field_validator("wind_kts", "current_kts")
    @classmethod
    def validate_non_negative(cls, v: List[List[float]]) -> List[List[float]]:
        for row in v:
            for value in row:
                if value < 0:
                    raise ValueError(f"Speeds must be non-negative, got {value}")
        return v


class MinimumTimeRequest(BaseModel):
    """Request for a minimum-time route over a time-varying grid."""
    grid: GridSpecModel
    slices: List[SurfaceSliceModel] = Field(..., min_length=1)
    obstacles: List[GridCellModel] = Field(default_factory=list)
    start: Position
    finish: Position
    time_interval_min: float = Field(10.0, gt=0, le=1440, description="Minutes each slice is valid for")
    allow_repeat_visits: bool = False
    pruning: Optional[Literal["exact", "dominance"]] = Field(
        None, description=("'exact' (default) keeps every partial path; 'dominance' keeps the fastest "
                            "per cell and slice and can return a slower route when slices differ"),
    )
    max_iterations: Optional[int] = Field(None, ge=1, le=10000)


class ReferenceRouteRequest(BaseModel):
    """Options for solving the bundled reference crossing."""
    slices: int = Field(200, ge=1, le=500)
    pruning: Optional[Literal["exact", "dominance"]] = None
    max_iterations: Optional[int] = Field(None, ge=1, le=10000)


class MinimumTimeResponse(BaseModel):
    """Result of a minimum-time search."""
    found: bool
    duration_min: float
    steps: int
    start_cell: GridCellModel
    finish_cell: GridCellModel
    path: List[GridCellModel]
    positions: List[Position]
    pruning: str
    calculation_time_ms: float


class PolarSummaryResponse(BaseModel):
    """Loaded vessel polar table."""
    name: str
    wind_speeds_kts: List[float]
    wind_angles_deg: List[float]
    min_speed_kts: float
    max_speed_kts: float
    speeds: Dict[str, List[float]] = Field(default_factory=dict, description="Boat speed per wind angle")
