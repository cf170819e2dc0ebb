"""Pydantic models for quizzes, questions, attempts and results.

Every model serialises to the camelCase JSON shape kept in the durable
store ("quizzes" and "quizResults") and accepts either camelCase or
snake_case keys on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from quiz_engine.config import DEFAULT_PASSING_SCORE
from quiz_engine.utils import new_id, utcnow

NOT_ANSWERED = "not answered"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump using the persisted camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


# --- Questions ---


class QuestionBase(CamelModel):
    id: str = Field(default_factory=new_id)
    question: str = ""
    points: int = Field(default=1, ge=1)
    explanation: str = ""

    @field_validator("points", mode="before")
    @classmethod
    def _default_points(cls, value):
        # Missing or zero points fall back to one point
        return value or 1

    @field_validator("explanation", mode="before")
    @classmethod
    def _default_explanation(cls, value):
        return value or ""


class MultipleChoiceQuestion(QuestionBase):
    """Single correct option, identified by its index in `options`."""

    type: Literal["multiple-choice"] = "multiple-choice"
    options: List[str] = Field(default_factory=list)
    correct_answer: int = 0


class TrueFalseQuestion(QuestionBase):
    type: Literal["true-false"] = "true-false"
    correct_answer: bool = True


class MultipleSelectQuestion(QuestionBase):
    """Any number of correct options, identified by their indices."""

    type: Literal["multiple-select"] = "multiple-select"
    options: List[str] = Field(default_factory=list)
    correct_answers: List[int] = Field(default_factory=list)


class ShortAnswerQuestion(QuestionBase):
    """Free-text answer checked against a list of acceptable answers."""

    type: Literal["short-answer"] = "short-answer"
    correct_answers: List[str] = Field(default_factory=list)


Question = Annotated[
    Union[MultipleChoiceQuestion, TrueFalseQuestion, MultipleSelectQuestion, ShortAnswerQuestion],
    Field(discriminator="type"),
]

question_adapter = TypeAdapter(Question)

CHOICE_QUESTION_TYPES = (MultipleChoiceQuestion, MultipleSelectQuestion)


def correct_answer_of(question: Question) -> Any:
    """Snapshot of the correct answer(s) of a question."""
    if isinstance(question, (MultipleChoiceQuestion, TrueFalseQuestion)):
        return question.correct_answer
    return list(question.correct_answers)


# --- Quizzes ---


class QuizSettings(CamelModel):
    time_limit: Optional[int] = None  # minutes, None = unlimited
    shuffle_questions: bool = False
    shuffle_options: bool = False
    show_correct_answers: bool = True
    passing_score: int = DEFAULT_PASSING_SCORE
    allow_review: bool = True
    allow_multiple_attempts: bool = True
    max_attempts: Optional[int] = None  # None = unlimited

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        # Unset options take their defaults; an explicit False is kept
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class QuizStats(CamelModel):
    total_attempts: int = 0
    average_score: int = 0
    highest_score: int = 0
    lowest_score: int = 0
    all_scores: List[int] = Field(default_factory=list)


class Quiz(CamelModel):
    """An authored quiz. Unknown top-level fields are kept as given."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    title: str = ""
    description: str = ""
    course_id: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)
    settings: QuizSettings = Field(default_factory=QuizSettings)
    stats: QuizStats = Field(default_factory=QuizStats)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("questions", "settings", "stats", mode="before")
    @classmethod
    def _none_to_default(cls, value, info):
        if value is None:
            return [] if info.field_name == "questions" else {}
        return value

    def get_question(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)


quiz_list_adapter = TypeAdapter(List[Quiz])


# --- Attempts and results ---


class Attempt(CamelModel):
    """A live, unsubmitted attempt. Answers are kept exactly as recorded."""

    id: str = Field(default_factory=new_id)
    quiz_id: str
    student_id: str
    started_at: datetime = Field(default_factory=utcnow)
    answers: Dict[str, Any] = Field(default_factory=dict)
    total_questions: int = 0


class QuestionOutcome(CamelModel):
    """Per-question line of a result."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    question_id: str
    question_text: str
    answered: bool
    student_answer: Any = None
    correct_answer: Any = None
    is_correct: bool
    explanation: str = ""
    points: int = 0

    @computed_field
    @property
    def answer_display(self) -> Any:
        return self.student_answer if self.answered else NOT_ANSWERED


class QuizResult(CamelModel):
    """The immutable record of a submitted attempt."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=new_id)
    attempt_id: str
    quiz_id: str
    student_id: str
    score: int
    total_points: int
    correct_answers: int
    total_questions: int
    detailed_results: List[QuestionOutcome] = Field(default_factory=list)
    passed: bool
    started_at: datetime
    completed_at: datetime
    time_taken: str
    time_taken_seconds: int = 0


result_list_adapter = TypeAdapter(List[QuizResult])
