"""Publishing checks for authored quizzes.

The catalog stores whatever it is given; authoring screens run these
checks before creating or publishing a quiz.
"""

from typing import Dict

from quiz_engine.schemas import (
    MultipleChoiceQuestion,
    MultipleSelectQuestion,
    Quiz,
    ShortAnswerQuestion,
)
from quiz_engine.utils import sanitize_text

MIN_CHOICE_OPTIONS = 2


def validate_quiz_for_publishing(quiz: Quiz) -> Dict[str, str]:
    """Validate a quiz and return an error dictionary (empty when valid).

    Keys follow the authoring form: "title", "description", "questions",
    and per-question "question_<n>", "options_<n>", "answer_<n>".
    """
    errors: Dict[str, str] = {}

    if not sanitize_text(quiz.title):
        errors["title"] = "Quiz title is required"
    if not sanitize_text(quiz.description):
        errors["description"] = "Quiz description is required"

    if not quiz.questions:
        errors["questions"] = "Add at least one question"
        return errors

    for idx, question in enumerate(quiz.questions):
        # Prompts that are only markup count as empty
        if not sanitize_text(question.question):
            errors[f"question_{idx}"] = "Question text is required"

        if isinstance(question, (MultipleChoiceQuestion, MultipleSelectQuestion)):
            valid_options = [opt for opt in question.options if opt.strip()]
            if len(valid_options) < MIN_CHOICE_OPTIONS:
                errors[f"options_{idx}"] = f"At least {MIN_CHOICE_OPTIONS} options required"

        if isinstance(question, MultipleChoiceQuestion):
            if not 0 <= question.correct_answer < len(question.options):
                errors[f"answer_{idx}"] = "Select correct answer"

        if isinstance(question, MultipleSelectQuestion):
            if not question.correct_answers:
                errors[f"answer_{idx}"] = "Select at least one correct answer"
            elif any(not 0 <= i < len(question.options) for i in question.correct_answers):
                errors[f"answer_{idx}"] = "Correct answers must refer to existing options"

        if isinstance(question, ShortAnswerQuestion):
            if not question.correct_answers or any(not a.strip() for a in question.correct_answers):
                errors[f"answer_{idx}"] = "All correct answers must be filled"

    return errors
