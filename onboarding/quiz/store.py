"""Storage for active quiz sessions.

One session per learner: saving a session replaces whatever the learner had
before, which is how starting a quiz abandons an earlier unfinished one.
Sessions are ephemeral; losing one (restart, TTL expiry) is the same as the
learner walking away from the quiz.
"""

from typing import TYPE_CHECKING, Protocol

import structlog
from redis.exceptions import RedisError

from onboarding.core.redis import quiz_session_key
from onboarding.progress.exceptions import QuizSessionUnavailableError

from .session import QuizSession


if TYPE_CHECKING:
    import redis.asyncio as redis


logger = structlog.get_logger(__name__)


class QuizSessionStore(Protocol):
    """Holds each learner's active quiz session."""

    async def get(self, learner_id: str) -> QuizSession | None: ...

    async def save(self, session: QuizSession) -> None: ...

    async def discard(self, learner_id: str) -> bool: ...


class InMemoryQuizSessionStore:
    """Process-local session store (single worker deployments and tests)."""

    def __init__(self) -> None:
        self._sessions: dict[str, QuizSession] = {}

    async def get(self, learner_id: str) -> QuizSession | None:
        return self._sessions.get(learner_id)

    async def save(self, session: QuizSession) -> None:
        self._sessions[session.learner_id] = session

    async def discard(self, learner_id: str) -> bool:
        return self._sessions.pop(learner_id, None) is not None


class RedisQuizSessionStore:
    """Redis-backed session store shared by all API workers.

    Redis errors surface as QuizSessionUnavailableError.
    """

    def __init__(self, redis: "redis.Redis", ttl_seconds: int):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _unavailable(
        self, operation: str, error: RedisError
    ) -> QuizSessionUnavailableError:
        logger.error(
            "quiz_session_store_failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
        )
        return QuizSessionUnavailableError()

    async def get(self, learner_id: str) -> QuizSession | None:
        try:
            cached = await self.redis.get(quiz_session_key(learner_id))
        except RedisError as e:
            raise self._unavailable("get", e) from e
        if not cached:
            return None
        return QuizSession.model_validate_json(cached)

    async def save(self, session: QuizSession) -> None:
        try:
            await self.redis.set(
                quiz_session_key(session.learner_id),
                session.model_dump_json(),
                ex=self.ttl_seconds,
            )
        except RedisError as e:
            raise self._unavailable("save", e) from e

    async def discard(self, learner_id: str) -> bool:
        try:
            removed = await self.redis.delete(quiz_session_key(learner_id))
        except RedisError as e:
            raise self._unavailable("discard", e) from e
        return bool(removed)
