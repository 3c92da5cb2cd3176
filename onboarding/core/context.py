"""Request context management using contextvars.

Each request gets a unique ID; once the bearer token is decoded the learner's
identity is attached too, so every log line emitted further down the call
stack carries both without passing them around explicitly.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
learner_id_var: ContextVar[str | None] = ContextVar("learner_id", default=None)
learner_role_var: ContextVar[str | None] = ContextVar("learner_role", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context.

    Args:
        request_id: Optional request ID. If not provided, generates a new one.

    Returns:
        The request ID that was set.
    """
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_learner_id() -> str | None:
    """Get the current learner ID."""
    return learner_id_var.get()


def set_learner(learner_id: str | None, role: str | None = None) -> None:
    """Attach the authenticated learner to the current context."""
    learner_id_var.set(learner_id)
    learner_role_var.set(role)


def get_context() -> dict[str, Any]:
    """Get all context variables as a dictionary."""
    context: dict[str, Any] = {}

    request_id = get_request_id()
    if request_id:
        context["request_id"] = request_id

    learner_id = get_learner_id()
    if learner_id:
        context["learner_id"] = learner_id

    role = learner_role_var.get()
    if role:
        context["learner_role"] = role

    return context


def clear_context() -> None:
    """Clear all context variables.

    Called at the end of each request so values do not leak between requests.
    """
    request_id_var.set("")
    learner_id_var.set(None)
    learner_role_var.set(None)


class RequestContext:
    """Context manager for request scope.

    Usage:
        with RequestContext(learner_id="ana@school.org"):
            log.info("doing something")  # includes request_id, learner_id
    """

    def __init__(
        self,
        request_id: str | None = None,
        learner_id: str | None = None,
    ) -> None:
        self.request_id = request_id
        self.learner_id = learner_id
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "RequestContext":
        self._tokens["request_id"] = request_id_var.set(
            self.request_id or generate_request_id()
        )
        if self.learner_id is not None:
            self._tokens["learner_id"] = learner_id_var.set(self.learner_id)
        return self

    def __exit__(self, *_: object) -> None:
        request_id_var.reset(self._tokens["request_id"])
        if "learner_id" in self._tokens:
            learner_id_var.reset(self._tokens["learner_id"])
