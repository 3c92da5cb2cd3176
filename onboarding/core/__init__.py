# Core infrastructure
from onboarding.core.context import (
    RequestContext,
    clear_context,
    get_context,
    get_learner_id,
    get_request_id,
    set_learner,
    set_request_id,
)
from onboarding.core.logging import configure_structlog, get_logger
from onboarding.core.middleware import RequestContextMiddleware


__all__ = [
    "RequestContext",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_learner_id",
    "get_logger",
    "get_request_id",
    "set_learner",
    "set_request_id",
]
