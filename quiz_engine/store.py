"""Durable key-value store for quiz collections.

Each key holds one JSON document in the `storeentry` table. The two keys
in use are `QUIZZES_KEY` and `RESULTS_KEY`, each a flat camelCase JSON list
that browser localStorage clients can read as-is.
"""

import json
import logging
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from quiz_engine.exceptions import CorruptStoreError, StoreUnavailableError
from quiz_engine.models import StoreEntry
from quiz_engine.utils import utcnow

logger = logging.getLogger(__name__)

QUIZZES_KEY = "quizzes"
RESULTS_KEY = "quizResults"


class KeyValueStore:
    """Thin key-value layer over a SQLAlchemy engine."""

    def __init__(self, bind=None) -> None:
        if bind is None:
            from quiz_engine.database import engine as bind
        self.engine = bind

    def get_item(self, key: str) -> Optional[str]:
        """Return the raw value stored under `key`, or None if unset."""
        try:
            with Session(self.engine) as session:
                entry = session.get(StoreEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not read {key!r}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        """Insert or replace the value stored under `key`."""
        try:
            with Session(self.engine) as session:
                entry = session.get(StoreEntry, key)
                if entry:
                    entry.value = value
                    entry.updated_at = utcnow()
                else:
                    entry = StoreEntry(key=key, value=value)
                session.add(entry)
                session.commit()
            logger.debug("Stored %s (%d bytes)", key, len(value))
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not write {key!r}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            with Session(self.engine) as session:
                entry = session.get(StoreEntry, key)
                if entry:
                    session.delete(entry)
                    session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not remove {key!r}: {exc}") from exc

    def load_json(self, key: str, default: Any = None) -> Any:
        """Decode the JSON document under `key`.

        Raises:
            StoreUnavailableError: If the store cannot be read.
            CorruptStoreError: If the stored text is not valid JSON.
        """
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise CorruptStoreError(key, f"invalid JSON ({exc})") from exc

    def save_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value))

    def load_collection(self, key: str, adapter: TypeAdapter) -> List[Any]:
        """Load a JSON list under `key` and validate it with `adapter`.

        A missing key is an empty collection.

        Raises:
            StoreUnavailableError: If the store cannot be read.
            CorruptStoreError: If the document does not match the models.
        """
        data = self.load_json(key, default=[])
        try:
            return adapter.validate_python(data)
        except ValidationError as exc:
            raise CorruptStoreError(key, f"{exc.error_count()} invalid record field(s)") from exc

    def save_collection(self, key: str, items: List[Any]) -> None:
        """Store a list of models as camelCase JSON under `key`."""
        self.save_json(key, [item.model_dump(by_alias=True, mode="json") for item in items])
