"""SQLModel table backing the durable key-value store."""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreEntry(SQLModel, table=True):
    """One key of the durable store holding a JSON document.

    Two keys are used: "quizzes" and "quizResults".
    """

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=_utcnow)
