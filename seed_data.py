"""
Sample quiz seeder for local testing
Run this script to populate the quiz store with a few quizzes

Usage:
    python seed_data.py
"""

from quiz_engine.database import create_db_and_tables, engine
from quiz_engine.services.catalog_service import QuizCatalog
from quiz_engine.store import KeyValueStore

SAMPLE_QUIZZES = [
    {
        "title": "Python Basics",
        "description": "Variables, types and control flow",
        "courseId": "PY101",
        "settings": {"timeLimit": 15, "passingScore": 70},
        "questions": [
            {
                "type": "multiple-choice",
                "question": "Which keyword defines a function?",
                "options": ["func", "def", "lambda", "fn"],
                "correctAnswer": 1,
                "points": 2,
                "explanation": "`def` starts a function definition.",
            },
            {
                "type": "true-false",
                "question": "Python lists are immutable.",
                "correctAnswer": False,
            },
            {
                "type": "multiple-select",
                "question": "Which of these are built-in collection types?",
                "options": ["list", "array", "dict", "tuple"],
                "correctAnswers": [0, 2, 3],
                "points": 3,
            },
            {
                "type": "short-answer",
                "question": "What does `len([1, 2, 3])` return?",
                "correctAnswers": ["3", "three"],
            },
        ],
    },
    {
        "title": "HTTP Fundamentals",
        "description": "Methods, status codes and headers",
        "settings": {"shuffleQuestions": True, "maxAttempts": 3},
        "questions": [
            {
                "type": "multiple-choice",
                "question": "Which status code means Not Found?",
                "options": ["200", "301", "404", "500"],
                "correctAnswer": 2,
            },
            {
                "type": "true-false",
                "question": "GET requests should not change server state.",
                "correctAnswer": True,
            },
        ],
    },
]


def seed_database():
    """Create sample quizzes unless the store already has some"""

    print("Creating database tables...")
    create_db_and_tables()

    catalog = QuizCatalog(KeyValueStore(engine))
    if catalog.fetch_quizzes():
        print("Store already contains quizzes. Skipping seed.")
        return

    print("Seeding store with sample quizzes...")
    for data in SAMPLE_QUIZZES:
        quiz = catalog.create_quiz(data)
        print(f"✓ Created quiz {quiz.id}: {quiz.title} ({len(quiz.questions)} questions)")


if __name__ == "__main__":
    seed_database()
