"""Aggregate statistics over stored quiz results for instructors."""

from typing import Dict, List

from quiz_engine.schemas import QuizResult
from quiz_engine.utils import round_half_up

# (label, lower bound inclusive, upper bound exclusive)
SCORE_BUCKETS = [
    ("0-20%", 0, 20),
    ("20-40%", 20, 40),
    ("40-60%", 40, 60),
    ("60-80%", 60, 80),
    ("80-100%", 80, 101),
]


def summarize_quiz_results(results: List[QuizResult]) -> Dict[str, int]:
    """Return attempt count, score statistics, pass rate and average time."""
    if not results:
        return {
            "totalAttempts": 0,
            "averageScore": 0,
            "highestScore": 0,
            "lowestScore": 0,
            "passedCount": 0,
            "passRate": 0,
            "averageTimeMinutes": 0,
        }

    scores = [r.score for r in results]
    passed = [r for r in results if r.passed]
    average_seconds = sum(r.time_taken_seconds for r in results) / len(results)
    return {
        "totalAttempts": len(results),
        "averageScore": round_half_up(sum(scores) / len(scores)),
        "highestScore": max(scores),
        "lowestScore": min(scores),
        "passedCount": len(passed),
        "passRate": round_half_up(len(passed) / len(results) * 100),
        "averageTimeMinutes": round_half_up(average_seconds / 60),
    }


def score_distribution(results: List[QuizResult]) -> List[Dict]:
    """Count results per 20-point score bucket."""
    return [
        {"range": label, "count": len([r for r in results if low <= r.score < high])}
        for label, low, high in SCORE_BUCKETS
    ]


def score_timeline(results: List[QuizResult], limit: int = 10) -> List[Dict]:
    """The latest `limit` results by completion time, oldest first."""
    if limit <= 0:
        return []
    latest = sorted(results, key=lambda r: r.completed_at)[-limit:]
    return [
        {"attempt": f"A{idx + 1}", "score": r.score, "timeTaken": r.time_taken}
        for idx, r in enumerate(latest)
    ]
