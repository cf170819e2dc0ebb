"""Quiz catalog: create, edit, delete and load quizzes.

The catalog keeps the loaded quizzes in memory and writes the whole list
back to the durable store after every mutation. If a write fails the
in-memory list stays authoritative for the rest of the session.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from pydantic.alias_generators import to_camel

from quiz_engine.exceptions import StoreUnavailableError
from quiz_engine.schemas import Quiz, question_adapter, quiz_list_adapter
from quiz_engine.store import QUIZZES_KEY, KeyValueStore
from quiz_engine.utils import new_id, round_half_up, utcnow

logger = logging.getLogger(__name__)

# Set by the catalog itself; ignored in caller-supplied data
DERIVED_FIELDS = ("id", "createdAt", "updatedAt", "stats")

# Nested objects merged field by field on update
MERGED_FIELDS = ("settings",)


def _camelize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalise snake_case keys to the stored camelCase spelling."""
    return {(to_camel(k) if "_" in k else k): v for k, v in data.items()}


class QuizCatalog:
    """Owns the quiz records and their persistence.

    One catalog is shared by every session, so each mutation holds `lock`
    from lookup through persistence. The lock is re-entrant so the attempt
    engine can hold it across a whole submission.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self.quizzes: List[Quiz] = []
        self.current_quiz: Optional[Quiz] = None
        self.lock = threading.RLock()

    # --- loading and lookup ---

    def fetch_quizzes(self) -> List[Quiz]:
        """Load every quiz from the store, in creation order.

        An unreadable store yields an empty catalog. A corrupt one raises
        `CorruptStoreError`.
        """
        with self.lock:
            try:
                quizzes = self.store.load_collection(QUIZZES_KEY, quiz_list_adapter)
            except StoreUnavailableError:
                logger.exception("Error fetching quizzes", extra={"store_key": QUIZZES_KEY})
                quizzes = []
            self.quizzes = quizzes
            return list(quizzes)

    def fetch_quiz_by_id(self, quiz_id: str) -> Optional[Quiz]:
        """Return a loaded quiz and remember it as the current quiz."""
        with self.lock:
            quiz = self._find(quiz_id)
            self.current_quiz = quiz
            return quiz

    def get_quiz(self, quiz_id: str) -> Optional[Quiz]:
        """Look up a loaded quiz without changing the current quiz."""
        return self._find(quiz_id)

    def set_current_quiz(self, quiz: Optional[Quiz]) -> None:
        self.current_quiz = quiz

    # --- quiz CRUD ---

    def create_quiz(self, data: Dict[str, Any]) -> Quiz:
        """Create a quiz from author-supplied fields.

        A fresh id and both timestamps are assigned, unset settings take
        their defaults and stats start at zero. Fields are not validated
        beyond their types.
        """
        payload = _camelize_keys(dict(data))
        for key in DERIVED_FIELDS:
            payload.pop(key, None)

        now = utcnow()
        quiz = Quiz.model_validate(
            {**payload, "id": new_id(), "createdAt": now, "updatedAt": now, "stats": {}}
        )
        with self.lock:
            self.quizzes = self.quizzes + [quiz]
            self._persist()
        logger.info("Created quiz %s (%d questions)", quiz.id, len(quiz.questions), extra={"quiz_id": quiz.id})
        return quiz

    def update_quiz(self, quiz_id: str, partial: Dict[str, Any]) -> Optional[Quiz]:
        """Merge `partial` onto a quiz.

        Top-level fields are replaced. `settings` is merged field by field,
        so a partial settings object keeps the options it does not mention.
        `stats` is derived from submissions and cannot be set here. Returns
        None when the quiz does not exist.
        """
        changes = _camelize_keys(dict(partial))
        for key in DERIVED_FIELDS:
            changes.pop(key, None)

        with self.lock:
            existing = self._find(quiz_id)
            if existing is None:
                logger.info("Update skipped, quiz %s not found", quiz_id, extra={"quiz_id": quiz_id})
                return None

            merged = existing.model_dump(by_alias=True)
            for key, value in changes.items():
                if key in MERGED_FIELDS and isinstance(value, dict):
                    merged[key] = {**merged[key], **_camelize_keys(value)}
                else:
                    merged[key] = value
            merged["updatedAt"] = utcnow()

            updated = Quiz.model_validate(merged)
            self._replace(updated)
        logger.info("Updated quiz %s", quiz_id, extra={"quiz_id": quiz_id})
        return updated

    def delete_quiz(self, quiz_id: str) -> None:
        """Remove a quiz. Stored results for it are left in place."""
        with self.lock:
            self.quizzes = [q for q in self.quizzes if q.id != quiz_id]
            if self.current_quiz is not None and self.current_quiz.id == quiz_id:
                self.current_quiz = None
            self._persist()
        logger.info("Deleted quiz %s", quiz_id, extra={"quiz_id": quiz_id})

    # --- question editing ---

    def add_question(self, quiz_id: str, question_data: Dict[str, Any]) -> Optional[Quiz]:
        question = question_adapter.validate_python(question_data)
        with self.lock:
            quiz = self._find(quiz_id)
            if quiz is None:
                return None
            updated = quiz.model_copy(
                update={"questions": quiz.questions + [question], "updated_at": utcnow()}
            )
            self._replace(updated)
            return updated

    def update_question(
        self, quiz_id: str, question_id: str, question_data: Dict[str, Any]
    ) -> Optional[Quiz]:
        """Merge fields onto one question and re-validate it.

        Returns None when either the quiz or the question does not exist.
        """
        with self.lock:
            quiz = self._find(quiz_id)
            if quiz is None or quiz.get_question(question_id) is None:
                return None

            questions = []
            for question in quiz.questions:
                if question.id == question_id:
                    merged = {**question.model_dump(by_alias=True), **_camelize_keys(dict(question_data))}
                    merged["id"] = question_id
                    question = question_adapter.validate_python(merged)
                questions.append(question)

            updated = quiz.model_copy(update={"questions": questions, "updated_at": utcnow()})
            self._replace(updated)
            return updated

    def delete_question(self, quiz_id: str, question_id: str) -> Optional[Quiz]:
        with self.lock:
            quiz = self._find(quiz_id)
            if quiz is None:
                return None
            questions = [q for q in quiz.questions if q.id != question_id]
            updated = quiz.model_copy(update={"questions": questions, "updated_at": utcnow()})
            self._replace(updated)
            return updated

    # --- statistics ---

    def record_submission(self, quiz_id: str, score: int) -> Optional[Quiz]:
        """Append a score to a quiz's history and recompute its stats."""
        with self.lock:
            quiz = self._find(quiz_id)
            if quiz is None:
                return None

            all_scores = quiz.stats.all_scores + [score]
            stats = quiz.stats.model_copy(
                update={
                    "total_attempts": len(all_scores),
                    "average_score": round_half_up(sum(all_scores) / len(all_scores)),
                    "highest_score": max(all_scores),
                    "lowest_score": min(all_scores),
                    "all_scores": all_scores,
                }
            )
            updated = quiz.model_copy(update={"stats": stats, "updated_at": utcnow()})
            self._replace(updated)
            return updated

    # --- internals ---

    def _find(self, quiz_id: str) -> Optional[Quiz]:
        return next((q for q in self.quizzes if q.id == quiz_id), None)

    def _replace(self, quiz: Quiz) -> None:
        self.quizzes = [quiz if q.id == quiz.id else q for q in self.quizzes]
        if self.current_quiz is not None and self.current_quiz.id == quiz.id:
            self.current_quiz = quiz
        self._persist()

    def _persist(self) -> None:
        try:
            self.store.save_collection(QUIZZES_KEY, self.quizzes)
        except StoreUnavailableError:
            logger.exception("Error saving quizzes; keeping in-memory copy", extra={"store_key": QUIZZES_KEY})
