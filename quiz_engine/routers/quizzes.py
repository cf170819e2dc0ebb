"""Quiz catalog routes: authoring, question editing, results and analytics."""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from pydantic import ValidationError

from quiz_engine.deps import get_catalog, get_results_reader
from quiz_engine.services.analytics_service import (
    score_distribution,
    score_timeline,
    summarize_quiz_results,
)
from quiz_engine.services.attempt_service import AttemptEngine
from quiz_engine.services.catalog_service import QuizCatalog
from quiz_engine.services.quiz_validation import validate_quiz_for_publishing

router = APIRouter()


def _invalid(exc: ValidationError) -> HTTPException:
    detail = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


def _get_quiz_or_404(quiz_id: str, catalog: QuizCatalog):
    quiz = catalog.get_quiz(quiz_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz


@router.get("")
def list_quizzes(catalog: QuizCatalog = Depends(get_catalog)) -> List[Dict[str, Any]]:
    return [q.to_json_dict() for q in catalog.quizzes]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_quiz(payload: Dict[str, Any] = Body(...), catalog: QuizCatalog = Depends(get_catalog)):
    try:
        quiz = catalog.create_quiz(payload)
    except ValidationError as exc:
        raise _invalid(exc)
    return quiz.to_json_dict()


@router.get("/{quiz_id}")
def get_quiz(quiz_id: str, catalog: QuizCatalog = Depends(get_catalog)):
    return _get_quiz_or_404(quiz_id, catalog).to_json_dict()


@router.patch("/{quiz_id}")
def update_quiz(
    quiz_id: str,
    payload: Dict[str, Any] = Body(...),
    catalog: QuizCatalog = Depends(get_catalog),
):
    try:
        quiz = catalog.update_quiz(quiz_id, payload)
    except ValidationError as exc:
        raise _invalid(exc)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz.to_json_dict()


@router.delete("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quiz(quiz_id: str, catalog: QuizCatalog = Depends(get_catalog)):
    catalog.delete_quiz(quiz_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{quiz_id}/validation")
def validate_quiz(quiz_id: str, catalog: QuizCatalog = Depends(get_catalog)):
    """Report whether a quiz is ready to publish."""
    errors = validate_quiz_for_publishing(_get_quiz_or_404(quiz_id, catalog))
    return {"valid": not errors, "errors": errors}


# --- Questions ---


@router.post("/{quiz_id}/questions", status_code=status.HTTP_201_CREATED)
def add_question(
    quiz_id: str,
    payload: Dict[str, Any] = Body(...),
    catalog: QuizCatalog = Depends(get_catalog),
):
    try:
        quiz = catalog.add_question(quiz_id, payload)
    except ValidationError as exc:
        raise _invalid(exc)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz.to_json_dict()


@router.patch("/{quiz_id}/questions/{question_id}")
def update_question(
    quiz_id: str,
    question_id: str,
    payload: Dict[str, Any] = Body(...),
    catalog: QuizCatalog = Depends(get_catalog),
):
    try:
        quiz = catalog.update_question(quiz_id, question_id, payload)
    except ValidationError as exc:
        raise _invalid(exc)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz or question not found")
    return quiz.to_json_dict()


@router.delete("/{quiz_id}/questions/{question_id}")
def delete_question(quiz_id: str, question_id: str, catalog: QuizCatalog = Depends(get_catalog)):
    quiz = catalog.delete_question(quiz_id, question_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz.to_json_dict()


# --- Results ---


@router.get("/{quiz_id}/results")
def quiz_results(quiz_id: str, reader: AttemptEngine = Depends(get_results_reader)):
    return [r.to_json_dict() for r in reader.fetch_quiz_results(quiz_id)]


@router.get("/{quiz_id}/analytics")
def quiz_analytics(
    quiz_id: str,
    catalog: QuizCatalog = Depends(get_catalog),
    reader: AttemptEngine = Depends(get_results_reader),
):
    """Instructor summary: score statistics, distribution and recent attempts."""
    quiz = _get_quiz_or_404(quiz_id, catalog)
    results = reader.fetch_quiz_results(quiz_id)
    return {
        "quizId": quiz.id,
        "title": quiz.title,
        "summary": summarize_quiz_results(results),
        "distribution": score_distribution(results),
        "timeline": score_timeline(results),
    }
