"""Diagnostic tools — drain console output and failed requests as readable text."""

from __future__ import annotations

from typing import Optional

from pagelens.models.events import DiagnosticEntry, NetworkFailure
from pagelens.session.browser import BrowserSession

NO_CONSOLE_LOGS = "No console logs since last check."
NO_NETWORK_ERRORS = "No network errors since last check."


def console_logs(session: BrowserSession, level: Optional[str] = None) -> list[DiagnosticEntry]:
    return session.drain_diagnostics(level)


def network_errors(session: BrowserSession) -> list[NetworkFailure]:
    return session.drain_network_failures()


def format_console_entries(entries: list[DiagnosticEntry]) -> str:
    if not entries:
        return NO_CONSOLE_LOGS
    return "\n".join(
        f"[{e.kind.upper()}] {e.captured_at.isoformat()} — {e.text}" for e in entries
    )


def format_network_failures(failures: list[NetworkFailure]) -> str:
    if not failures:
        return NO_NETWORK_ERRORS
    return "\n".join(
        f"[{f.method}] {f.url} — {f.error_text} ({f.captured_at.isoformat()})"
        for f in failures
    )
