"""Learner-facing views of quizzes and results.

Shuffling only changes what is shown. Stored question order and option
indices stay untouched, so answers are still recorded and scored against
the stored option positions.
"""

import random
from typing import List, Optional

from quiz_engine.schemas import CHOICE_QUESTION_TYPES, Question, Quiz, QuizResult


def display_questions(quiz: Quiz, rng: Optional[random.Random] = None) -> List[dict]:
    """Return the quiz's questions in display order.

    Each entry is the question's camelCase JSON with the correct answers
    removed. Choice questions carry `displayOptions`, a list of
    {"index", "text"} pairs in display order.
    """
    rng = rng or random.Random()
    questions: List[Question] = list(quiz.questions)
    if quiz.settings.shuffle_questions:
        rng.shuffle(questions)

    shown = []
    for question in questions:
        data = question.model_dump(by_alias=True, mode="json", exclude={"correct_answer", "correct_answers"})
        if isinstance(question, CHOICE_QUESTION_TYPES):
            options = [{"index": i, "text": text} for i, text in enumerate(question.options)]
            if quiz.settings.shuffle_options:
                rng.shuffle(options)
            data["displayOptions"] = options
        shown.append(data)
    return shown


def review_result(result: QuizResult, quiz: Optional[Quiz]) -> QuizResult:
    """Return the copy of `result` a learner may see.

    Correct answers and explanations are blanked when the quiz hides them.
    A deleted quiz shows the result unchanged.
    """
    if quiz is None or quiz.settings.show_correct_answers:
        return result
    hidden = [
        outcome.model_copy(update={"correct_answer": None, "explanation": ""})
        for outcome in result.detailed_results
    ]
    return result.model_copy(update={"detailed_results": hidden})
