"""Attempt routes: start, answer, submit, and result lookups.

The live attempt belongs to the caller's cookie session, so two browsers
taking quizzes at the same time never see each other's answers.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from pydantic import BaseModel

from quiz_engine.deps import (
    find_attempt_engine,
    get_attempt_sessions,
    get_catalog,
    get_existing_session_key,
    get_results_reader,
    get_session_key,
)
from quiz_engine.schemas import CamelModel
from quiz_engine.services.attempt_service import AttemptEngine, AttemptSessions
from quiz_engine.services.catalog_service import QuizCatalog
from quiz_engine.services.review import display_questions, review_result

router = APIRouter()


class StartAttemptIn(CamelModel):
    quiz_id: str
    student_id: str


class AnswerIn(BaseModel):
    answer: Any = None


@router.post("/attempts", status_code=status.HTTP_201_CREATED)
def api_start_attempt(
    payload: StartAttemptIn = Body(...),
    catalog: QuizCatalog = Depends(get_catalog),
    sessions: AttemptSessions = Depends(get_attempt_sessions),
    session_key: str = Depends(get_session_key),
):
    """Start an attempt; the only route that creates a session engine."""
    quiz = catalog.get_quiz(payload.quiz_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    engine = sessions.get(session_key)
    attempt = engine.start_attempt(payload.quiz_id, payload.student_id)
    if attempt is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return {
        "attempt": attempt.to_json_dict(),
        "questions": display_questions(quiz),
        "timeLimit": quiz.settings.time_limit,
        "remainingAttempts": engine.remaining_attempts(payload.quiz_id, payload.student_id),
    }


@router.get("/attempts/current")
def api_current_attempt(engine: Optional[AttemptEngine] = Depends(find_attempt_engine)):
    if engine is None or engine.current_attempt is None:
        raise HTTPException(status_code=404, detail="No attempt in progress")
    return engine.current_attempt.to_json_dict()


@router.put("/attempts/current/answers/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_record_answer(
    question_id: str,
    payload: AnswerIn = Body(...),
    engine: Optional[AttemptEngine] = Depends(find_attempt_engine),
):
    if engine is not None:
        engine.record_answer(question_id, payload.answer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/attempts/current/submit")
def api_submit(
    engine: Optional[AttemptEngine] = Depends(find_attempt_engine),
    sessions: AttemptSessions = Depends(get_attempt_sessions),
    session_key: Optional[str] = Depends(get_existing_session_key),
):
    """Submit the live attempt; also used by the timer when time runs out."""
    if engine is None:
        raise HTTPException(status_code=404, detail="No attempt to submit")
    result = engine.submit_quiz()
    sessions.discard(session_key)
    if result is None:
        raise HTTPException(status_code=404, detail="No attempt to submit")
    quiz = engine.catalog.get_quiz(result.quiz_id)
    return review_result(result, quiz).to_json_dict()


@router.delete("/attempts/current", status_code=status.HTTP_204_NO_CONTENT)
def api_clear_attempt(
    sessions: AttemptSessions = Depends(get_attempt_sessions),
    session_key: Optional[str] = Depends(get_existing_session_key),
):
    sessions.discard(session_key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/students/{student_id}/results")
def api_student_results(
    student_id: str,
    quiz_id: Optional[str] = None,
    reader: AttemptEngine = Depends(get_results_reader),
):
    results = reader.fetch_student_results(student_id)
    if quiz_id is not None:
        results = [r for r in results if r.quiz_id == quiz_id]
    return [review_result(r, reader.catalog.get_quiz(r.quiz_id)).to_json_dict() for r in results]
