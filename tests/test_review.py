"""Learner views: question display order and result review."""

import random

from quiz_engine.schemas import Quiz
from quiz_engine.services.review import display_questions, review_result

from conftest import sample_quiz_data


def _quiz(**settings):
    return Quiz.model_validate({"id": "quiz", **sample_quiz_data(settings=settings)})


class TestDisplayQuestions:
    def test_stored_order_without_shuffling(self):
        shown = display_questions(_quiz())
        assert [q["id"] for q in shown] == ["q-mc", "q-tf", "q-ms", "q-sa"]

    def test_correct_answers_are_not_shown(self):
        for entry in display_questions(_quiz()):
            assert "correctAnswer" not in entry
            assert "correctAnswers" not in entry

    def test_choice_questions_carry_indexed_options(self):
        shown = display_questions(_quiz())
        assert shown[0]["displayOptions"] == [
            {"index": 0, "text": "3"},
            {"index": 1, "text": "4"},
            {"index": 2, "text": "5"},
        ]
        assert "displayOptions" not in shown[1]
        assert "displayOptions" not in shown[3]

    def test_shuffled_questions_are_a_permutation(self):
        quiz = _quiz(shuffleQuestions=True)
        orders = {tuple(q["id"] for q in display_questions(quiz, random.Random(seed))) for seed in range(20)}

        assert all(sorted(order) == sorted(["q-mc", "q-tf", "q-ms", "q-sa"]) for order in orders)
        assert len(orders) > 1

    def test_shuffled_options_keep_their_stored_index(self):
        quiz = _quiz(shuffleOptions=True)
        for seed in range(10):
            options = display_questions(quiz, random.Random(seed))[2]["displayOptions"]
            assert sorted(o["index"] for o in options) == [0, 1, 2, 3]
            for option in options:
                assert quiz.questions[2].options[option["index"]] == option["text"]

    def test_shuffling_does_not_touch_the_quiz(self):
        quiz = _quiz(shuffleQuestions=True, shuffleOptions=True)
        display_questions(quiz, random.Random(3))
        assert [q.id for q in quiz.questions] == ["q-mc", "q-tf", "q-ms", "q-sa"]
        assert quiz.questions[0].options == ["3", "4", "5"]


class TestReviewResult:
    def _submit(self, attempt_engine, quiz):
        attempt_engine.start_attempt(quiz.id, "s")
        attempt_engine.record_answer("q-mc", 0)
        return attempt_engine.submit_quiz()

    def test_result_unchanged_when_answers_are_shown(self, attempt_engine, sample_quiz):
        result = self._submit(attempt_engine, sample_quiz)
        assert review_result(result, sample_quiz) is result

    def test_answers_and_explanations_hidden(self, catalog, attempt_engine):
        quiz = catalog.create_quiz(sample_quiz_data(settings={"showCorrectAnswers": False}))
        result = self._submit(attempt_engine, quiz)
        reviewed = review_result(result, quiz)

        assert all(o.correct_answer is None for o in reviewed.detailed_results)
        assert all(o.explanation == "" for o in reviewed.detailed_results)
        assert reviewed.score == result.score
        assert reviewed.detailed_results[0].student_answer == 0
        # The stored result keeps them
        assert result.detailed_results[0].correct_answer == 1
        assert result.detailed_results[0].explanation == "Basic addition."

    def test_deleted_quiz_shows_result_unchanged(self, attempt_engine, sample_quiz):
        result = self._submit(attempt_engine, sample_quiz)
        assert review_result(result, None) is result
