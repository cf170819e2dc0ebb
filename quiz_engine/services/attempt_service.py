"""Attempt lifecycle and result persistence.

An `AttemptEngine` holds at most one live attempt:

    [no attempt] --start_attempt--> [in progress] --record_answer*--> [in progress]
    [in progress] --submit_quiz--> [no attempt]  (stores a QuizResult)

`AttemptSessions` hands out one engine per session key so that learners
never share a live attempt, and drops the engine once its attempt is over.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from quiz_engine.config import SHORT_ANSWER_MATCHING
from quiz_engine.exceptions import StoreUnavailableError
from quiz_engine.schemas import Attempt, QuizResult, result_list_adapter
from quiz_engine.services.catalog_service import QuizCatalog
from quiz_engine.services.scoring import score_attempt
from quiz_engine.store import RESULTS_KEY, KeyValueStore
from quiz_engine.utils import format_time_taken, utcnow

logger = logging.getLogger(__name__)


class AttemptEngine:
    """Runs one learner's attempts against a shared catalog.

    `unsaved_results` collects results whose write to the store failed.
    Engines that pass the same list see each other's unsaved results.
    """

    def __init__(
        self,
        catalog: QuizCatalog,
        store: Optional[KeyValueStore] = None,
        short_answer_matching: bool = SHORT_ANSWER_MATCHING,
        clock: Callable[[], datetime] = utcnow,
        unsaved_results: Optional[List[QuizResult]] = None,
    ) -> None:
        self.catalog = catalog
        self.store = store or catalog.store
        self.short_answer_matching = short_answer_matching
        self.clock = clock
        self._attempt: Optional[Attempt] = None
        self._unsaved_results: List[QuizResult] = [] if unsaved_results is None else unsaved_results

    @property
    def current_attempt(self) -> Optional[Attempt]:
        return self._attempt

    def start_attempt(self, quiz_id: str, student_id: str) -> Optional[Attempt]:
        """Start a fresh attempt, discarding any attempt already in progress.

        Returns None, without touching the current attempt, when the quiz
        is not in the catalog's loaded set.
        """
        quiz = self.catalog.get_quiz(quiz_id)
        if quiz is None:
            logger.info("Cannot start attempt, quiz %s not found", quiz_id, extra={"quiz_id": quiz_id})
            return None

        if self._attempt is not None:
            logger.info(
                "Discarding unsubmitted attempt %s", self._attempt.id, extra={"attempt_id": self._attempt.id}
            )

        self._attempt = Attempt(
            quiz_id=quiz_id,
            student_id=student_id,
            started_at=self.clock(),
            total_questions=len(quiz.questions),
        )
        logger.info(
            "Student %s started attempt %s on quiz %s",
            student_id,
            self._attempt.id,
            quiz_id,
            extra={"quiz_id": quiz_id, "attempt_id": self._attempt.id, "student_id": student_id},
        )
        return self._attempt

    def record_answer(self, question_id: str, answer: Any) -> None:
        """Record or overwrite the answer to one question. No-op without an attempt."""
        if self._attempt is None:
            return
        answers = {**self._attempt.answers, question_id: answer}
        self._attempt = self._attempt.model_copy(update={"answers": answers})

    def clear_attempt(self) -> None:
        self._attempt = None

    def submit_quiz(self) -> Optional[QuizResult]:
        """Score the live attempt, store the result and update quiz stats.

        The attempt is cleared whether or not its quiz still exists, so a
        dangling attempt cannot be resubmitted. Storing the result and
        updating the stats run under the catalog lock as one step.
        """
        attempt = self._attempt
        if attempt is None:
            return None
        self._attempt = None
        context = {"quiz_id": attempt.quiz_id, "attempt_id": attempt.id, "student_id": attempt.student_id}

        with self.catalog.lock:
            quiz = self.catalog.get_quiz(attempt.quiz_id)
            if quiz is None:
                logger.warning(
                    "Attempt %s dropped, quiz %s no longer exists", attempt.id, attempt.quiz_id, extra=context
                )
                return None

            summary = score_attempt(quiz, attempt.answers, self.short_answer_matching)
            completed_at = self.clock()
            elapsed = max(0, int((completed_at - attempt.started_at).total_seconds()))

            result = QuizResult(
                attempt_id=attempt.id,
                quiz_id=attempt.quiz_id,
                student_id=attempt.student_id,
                score=summary.score,
                total_points=summary.total_points,
                correct_answers=summary.correct_answers,
                total_questions=summary.total_questions,
                detailed_results=summary.outcomes,
                passed=summary.score >= quiz.settings.passing_score,
                started_at=attempt.started_at,
                completed_at=completed_at,
                time_taken=format_time_taken(elapsed),
                time_taken_seconds=elapsed,
            )

            self._append_result(result)
            self.catalog.record_submission(quiz.id, result.score)

        logger.info(
            "Attempt %s submitted: score=%d passed=%s", attempt.id, result.score, result.passed, extra=context
        )
        return result

    # --- result queries ---

    def fetch_student_results(self, student_id: str) -> List[QuizResult]:
        return [r for r in self._load_results() if r.student_id == student_id]

    def fetch_quiz_results(self, quiz_id: str) -> List[QuizResult]:
        return [r for r in self._load_results() if r.quiz_id == quiz_id]

    def remaining_attempts(self, quiz_id: str, student_id: str) -> Optional[int]:
        """How many more attempts the quiz settings allow the student.

        None means unlimited. Advisory only: `start_attempt` does not
        enforce it.
        """
        quiz = self.catalog.get_quiz(quiz_id)
        if quiz is None:
            return 0
        settings = quiz.settings
        if settings.allow_multiple_attempts:
            limit = settings.max_attempts
        else:
            limit = 1
        if limit is None:
            return None
        used = len([r for r in self.fetch_quiz_results(quiz_id) if r.student_id == student_id])
        return max(0, limit - used)

    # --- internals ---

    def _load_results(self) -> List[QuizResult]:
        try:
            stored = self.store.load_collection(RESULTS_KEY, result_list_adapter)
        except StoreUnavailableError:
            logger.exception("Error fetching quiz results", extra={"store_key": RESULTS_KEY})
            return list(self._unsaved_results)
        return stored + list(self._unsaved_results)

    def _append_result(self, result: QuizResult) -> None:
        # A failed write is not retried; the result is only kept in memory
        try:
            stored = self.store.load_collection(RESULTS_KEY, result_list_adapter)
            self.store.save_collection(RESULTS_KEY, stored + [result])
        except StoreUnavailableError:
            logger.exception(
                "Error saving result %s; keeping it in memory",
                result.id,
                extra={"store_key": RESULTS_KEY, "attempt_id": result.attempt_id},
            )
            self._unsaved_results.append(result)


class AttemptSessions:
    """Registry of attempt engines keyed by session.

    `reader` is a shared engine for result queries, so read-only callers
    never need a session engine of their own.
    """

    def __init__(self, catalog: QuizCatalog, **engine_options) -> None:
        self.catalog = catalog
        self.engine_options = engine_options
        self._engines: Dict[str, AttemptEngine] = {}
        self._unsaved_results: List[QuizResult] = []
        self._lock = threading.Lock()
        self.reader = self._new_engine()

    def _new_engine(self) -> AttemptEngine:
        return AttemptEngine(self.catalog, unsaved_results=self._unsaved_results, **self.engine_options)

    def get(self, session_key: str) -> AttemptEngine:
        """Return the session's engine, creating it on first use."""
        with self._lock:
            engine = self._engines.get(session_key)
            if engine is None:
                engine = self._new_engine()
                self._engines[session_key] = engine
            return engine

    def find(self, session_key: Optional[str]) -> Optional[AttemptEngine]:
        """Return the session's engine if it has one."""
        if not session_key:
            return None
        with self._lock:
            return self._engines.get(session_key)

    def discard(self, session_key: Optional[str]) -> None:
        with self._lock:
            self._engines.pop(session_key, None)

    def __len__(self) -> int:
        return len(self._engines)
