"""
Voice-call session list for CallSync.

Formats the raw session records of a case for display above the
players: one accordion section per call, labelled with its date and
duration.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import structlog
from pydantic import BaseModel, Field, computed_field

from cs_common.models import CallSession
from cs_common.utils import format_date, format_duration

logger = structlog.get_logger()

DEFAULT_AGENT_NAME = "Unknown Agent"
DEFAULT_CALL_TYPE = "Voice Call"
GENERIC_ERROR_MESSAGE = "An error occurred while loading call recordings."


class SessionView(CallSession):
    """A :class:`CallSession` enriched with display fields."""

    formatted_date: str = Field(default="N/A", description="Display date.")
    formatted_duration: str = Field(default="N/A", description="Display duration.")
    accordion_label: str = Field(default="", description="Accordion section label.")


def process_sessions(raw_sessions: Iterable[CallSession | Mapping[str, Any]]) -> list[SessionView]:
    """Enrich raw session records for display.

    Args:
        raw_sessions: Session models or plain dicts in display order.

    Returns:
        One :class:`SessionView` per session, labelled
        ``Call N - <date> (<duration>)``, with agent name and call type
        defaulted when missing.
    """
    views: list[SessionView] = []
    for n, raw in enumerate(raw_sessions, start=1):
        session = raw if isinstance(raw, CallSession) else CallSession.model_validate(raw)
        formatted_date = format_date(session.created_date)
        formatted_duration = format_duration(session.duration)
        data = session.model_dump()
        data.update(
            agent_name=session.agent_name or DEFAULT_AGENT_NAME,
            call_type=session.call_type or DEFAULT_CALL_TYPE,
            formatted_date=formatted_date,
            formatted_duration=formatted_duration,
            accordion_label=f"Call {n} - {formatted_date} ({formatted_duration})",
        )
        views.append(SessionView.model_validate(data))
    return views


def initial_active_sections(sessions: Sequence[SessionView]) -> list[str]:
    """Sections expanded on first render: the only session, if exactly one."""
    if len(sessions) == 1:
        return [sessions[0].session_id]
    return []


def error_message(error: object | None) -> str:
    """User-facing message for a session-load failure.

    A ``{"body": {"message": ...}}`` payload (or an object with a
    ``body`` attribute shaped that way) supplies its own message;
    anything else gets the generic text.
    """
    if error is None:
        return ""
    body = error.get("body") if isinstance(error, Mapping) else getattr(error, "body", None)
    if isinstance(body, Mapping) and body.get("message"):
        return str(body["message"])
    return GENERIC_ERROR_MESSAGE


class SessionList(BaseModel):
    """Display state of the session list for one case.

    Attributes:
        case_id: Owning case identifier.
        sessions: Enriched sessions.
        active_sections: Expanded accordion sections.
        is_loading: Sessions not yet delivered.
        error: Raw load error, if any.
    """

    case_id: str | None = None
    sessions: list[SessionView] = Field(default_factory=list)
    active_sections: list[str] = Field(default_factory=list)
    is_loading: bool = True
    error: Any = Field(default=None, exclude=True)

    def load(self, raw_sessions: Iterable[CallSession | Mapping[str, Any]]) -> None:
        """Install a successful session-query result."""
        self.is_loading = False
        self.sessions = process_sessions(raw_sessions)
        self.error = None
        self.active_sections = initial_active_sections(self.sessions)
        logger.info("sessions_loaded", case_id=self.case_id, sessions=len(self.sessions))

    def fail(self, error: object) -> None:
        """Record a failed session query."""
        self.is_loading = False
        self.error = error
        self.sessions = []
        self.active_sections = []
        logger.error("sessions_load_failed", case_id=self.case_id, error=str(error))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_calls(self) -> bool:
        return not self.is_loading and self.error is None and bool(self.sessions)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_no_calls(self) -> bool:
        return not self.is_loading and self.error is None and not self.sessions

    @computed_field  # type: ignore[prop-decorator]
    @property
    def error_message(self) -> str:
        return error_message(self.error)

    def handle_playback_update(self, session_id: str | None, current_time: float, is_playing: bool) -> None:
        """Playback-update sink suitable for ``CallTranscriptPlayer``."""
        logger.debug(
            "playback_update",
            case_id=self.case_id,
            session_id=session_id,
            current_time=current_time,
            is_playing=is_playing,
        )
