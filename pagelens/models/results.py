"""Result data structures returned by capture and inspection operations."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class VisualDiffResult(BaseModel):
    route: str
    is_baseline: bool
    diff_image: Optional[bytes] = None  # PNG, same dimensions as the capture
    percent_changed: Optional[float] = None
    pixels_different: Optional[int] = None
    total_pixels: Optional[int] = None


class RouteScreenshot(BaseModel):
    route: str
    image: bytes


class BoundingBox(BaseModel):
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


class ElementSummary(BaseModel):
    tag_name: str
    id: str = ""
    classes: list[str] = Field(default_factory=list)


class DomInspectResult(BaseModel):
    tag_name: str
    id: str = ""
    classes: list[str] = Field(default_factory=list)
    computed_styles: dict[str, str] = Field(default_factory=dict)
    children: list[ElementSummary] = Field(default_factory=list)
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)


class Size(BaseModel):
    width: int = 0
    height: int = 0


class ScrollPosition(BaseModel):
    x: int = 0
    y: int = 0


class PageInfo(BaseModel):
    url: str
    title: str = ""
    viewport: Size = Field(default_factory=Size)
    scroll_position: ScrollPosition = Field(default_factory=ScrollPosition)
    document_size: Size = Field(default_factory=Size)
