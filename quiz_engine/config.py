"""Runtime configuration for the quiz engine."""

import os

# Durable key-value store
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./quiz_engine.db")

# Signs the session cookie that carries the attempt session key
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "CHANGE_ME_TO_A_RANDOM_SECRET")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")  # json | plain

# Trimmed, case-insensitive matching for short-answer questions
SHORT_ANSWER_MATCHING = os.getenv("SHORT_ANSWER_MATCHING", "true").lower() in ("1", "true", "yes")

DEFAULT_PASSING_SCORE = int(os.getenv("DEFAULT_PASSING_SCORE", "60"))
