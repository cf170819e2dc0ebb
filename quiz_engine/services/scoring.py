"""Scoring for the four question types.

Functions:
- is_answer_correct: correctness of one recorded answer against one question.
- score_attempt: per-question outcomes plus the aggregate score of an attempt.

Answers are compared without type coercion: the string "true" does not
match True and 1 does not match True. Unexpected answer shapes are scored
as incorrect instead of raising.
"""

from typing import Any, Dict, List, NamedTuple

from quiz_engine.schemas import (
    MultipleChoiceQuestion,
    MultipleSelectQuestion,
    Question,
    QuestionOutcome,
    Quiz,
    ShortAnswerQuestion,
    TrueFalseQuestion,
    correct_answer_of,
)
from quiz_engine.utils import is_number, round_half_up, strict_equals


class ScoreSummary(NamedTuple):
    outcomes: List[QuestionOutcome]
    correct_answers: int
    total_questions: int
    total_points: int
    score: int


def _same_index_set(answer: Any, correct: List[int]) -> bool:
    if not isinstance(answer, (list, tuple, set, frozenset)):
        return False
    if not all(is_number(a) for a in answer):
        return False
    return len(answer) == len(correct) and set(answer) == set(correct)


def _matches_short_answer(answer: Any, acceptable: List[str]) -> bool:
    if not isinstance(answer, str):
        return False
    candidate = answer.strip().casefold()
    if not candidate:
        return False
    return candidate in {a.strip().casefold() for a in acceptable if a.strip()}


def is_answer_correct(question: Question, answer: Any, short_answer_matching: bool = True) -> bool:
    """Return whether `answer` is correct for `question`."""
    if isinstance(question, MultipleChoiceQuestion):
        return strict_equals(answer, question.correct_answer)
    if isinstance(question, TrueFalseQuestion):
        return strict_equals(answer, question.correct_answer)
    if isinstance(question, MultipleSelectQuestion):
        return _same_index_set(answer, question.correct_answers)
    if isinstance(question, ShortAnswerQuestion):
        return short_answer_matching and _matches_short_answer(answer, question.correct_answers)
    raise TypeError(f"Unsupported question type: {type(question).__name__}")


def score_attempt(
    quiz: Quiz, answers: Dict[str, Any], short_answer_matching: bool = True
) -> ScoreSummary:
    """Score recorded answers against every question of `quiz`, in order.

    Unanswered questions are incorrect and earn no points. The score is
    the rounded percentage of correct questions, 0 for an empty quiz.
    """
    outcomes: List[QuestionOutcome] = []
    correct_count = 0

    for question in quiz.questions:
        answered = question.id in answers
        answer = answers.get(question.id)
        is_correct = answered and is_answer_correct(question, answer, short_answer_matching)
        if is_correct:
            correct_count += 1

        outcomes.append(
            QuestionOutcome(
                question_id=question.id,
                question_text=question.question,
                answered=answered,
                student_answer=answer,
                correct_answer=correct_answer_of(question),
                is_correct=is_correct,
                explanation=question.explanation,
                points=question.points if is_correct else 0,
            )
        )

    total_questions = len(quiz.questions)
    score = round_half_up(correct_count / total_questions * 100) if total_questions else 0
    total_points = sum(o.points for o in outcomes)
    return ScoreSummary(outcomes, correct_count, total_questions, total_points, score)
