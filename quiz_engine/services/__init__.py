"""Catalog, attempt, scoring and reporting services."""

from quiz_engine.services.attempt_service import AttemptEngine, AttemptSessions
from quiz_engine.services.catalog_service import QuizCatalog

__all__ = ["AttemptEngine", "AttemptSessions", "QuizCatalog"]
