"""Configuration models for PageLens."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from pagelens.url_utils import is_http_url

VIEWPORT_PRESETS: dict[str, dict[str, int]] = {
    "mobile": {"width": 375, "height": 812},
    "tablet": {"width": 768, "height": 1024},
    "desktop": {"width": 1280, "height": 720},
}


class ViewportConfig(BaseModel):
    width: int = 1280
    height: int = 720
    name: str = "desktop"

    @classmethod
    def from_preset(cls, preset: str) -> "ViewportConfig":
        """Build a viewport from a named preset (mobile, tablet, desktop)."""
        dims = VIEWPORT_PRESETS.get(preset)
        if dims is None:
            raise ValueError(
                f"Invalid viewport preset '{preset}'. Use {', '.join(VIEWPORT_PRESETS)}."
            )
        return cls(name=preset, **dims)

    @classmethod
    def custom(cls, width: int, height: int) -> "ViewportConfig":
        return cls(width=width, height=height, name="custom")

    def as_size(self) -> dict[str, int]:
        """Return the {width, height} dict Playwright expects."""
        return {"width": self.width, "height": self.height}


class LensConfig(BaseModel):
    # Target
    target_url: str

    # Browser
    headless: bool = True
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    browser_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )
    user_agent: Optional[str] = None

    # Diagnostics
    buffer_capacity: int = Field(default=1000, ge=1)

    # Timeouts (milliseconds)
    initial_navigation_timeout_ms: int = 30000
    navigation_timeout_ms: int = 15000
    selector_timeout_ms: int = 5000
    settle_timeout_ms: int = 3000
    screenshot_timeout_ms: int = 15000

    @field_validator("target_url")
    @classmethod
    def validate_target_url(cls, v: str) -> str:
        if not is_http_url(v):
            raise ValueError(f"Invalid URL '{v}'")
        return v

    @classmethod
    def load(cls, path: str | Path) -> "LensConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
