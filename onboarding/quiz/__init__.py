"""Quiz taking.

Provides:
- The quiz session state machine and scoring
- Session storage (Redis or in-process)
"""

from .session import PASS_MARK, QuizSession, QuizState
from .store import InMemoryQuizSessionStore, RedisQuizSessionStore


__all__ = [
    "PASS_MARK",
    "InMemoryQuizSessionStore",
    "QuizSession",
    "QuizState",
    "RedisQuizSessionStore",
]
