"""Shared FastAPI dependencies for the catalog and attempt engines."""

import uuid
from typing import Optional

from fastapi import Depends, Request

from quiz_engine.services.attempt_service import AttemptEngine, AttemptSessions
from quiz_engine.services.catalog_service import QuizCatalog

SESSION_KEY = "attempt_session"


def get_catalog(request: Request) -> QuizCatalog:
    """Return the application-wide quiz catalog."""
    return request.app.state.catalog


def get_attempt_sessions(request: Request) -> AttemptSessions:
    return request.app.state.attempt_sessions


def get_results_reader(sessions: AttemptSessions = Depends(get_attempt_sessions)) -> AttemptEngine:
    """Shared engine for result queries; never tied to a session."""
    return sessions.reader


def get_session_key(request: Request) -> str:
    """Return this browser session's attempt key, creating it on first use."""
    key = request.session.get(SESSION_KEY)
    if not key:
        key = uuid.uuid4().hex
        request.session[SESSION_KEY] = key
    return key


def get_existing_session_key(request: Request) -> Optional[str]:
    return request.session.get(SESSION_KEY)


def find_attempt_engine(
    session_key: Optional[str] = Depends(get_existing_session_key),
    sessions: AttemptSessions = Depends(get_attempt_sessions),
) -> Optional[AttemptEngine]:
    """Return the caller's session engine, or None if no attempt was started."""
    return sessions.find(session_key)
