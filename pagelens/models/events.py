"""Diagnostic event records captured from the live page."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DiagnosticKind = Literal["log", "warn", "error", "info", "debug"]

DIAGNOSTIC_KINDS: tuple[str, ...] = ("log", "warn", "error", "info", "debug")

# Playwright reports console.warn() as "warning"
_KIND_ALIASES = {"warning": "warn"}


def normalize_kind(raw: str | None) -> str:
    """Map a console message type onto a known kind, falling back to ``log``."""
    kind = _KIND_ALIASES.get(raw or "", raw)
    return kind if kind in DIAGNOSTIC_KINDS else "log"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DiagnosticEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: DiagnosticKind = "log"
    text: str = ""
    captured_at: datetime = Field(default_factory=_now)


class NetworkFailure(BaseModel):
    """A request that failed at the transport level (not an HTTP error status)."""

    model_config = ConfigDict(frozen=True)

    url: str
    method: str = "GET"
    error_text: str = "Unknown error"
    captured_at: datetime = Field(default_factory=_now)
