"""Common shared schemas used across multiple domains."""

from pydantic import BaseModel, Field


class Position(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class GridCellModel(BaseModel):
    """Zero-based (row, col) index into the routing grid."""
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)
