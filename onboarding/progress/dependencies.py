"""FastAPI dependencies for learner training.

Provides dependency injection for:
- Training service
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .exceptions import TrainingError
from .service import TrainingService


async def get_training_service(request: Request) -> TrainingService:
    """Get training service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "training_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Training service not available",
        )
    return app_state.training_service


# Type alias for dependency injection
TrainingServiceDep = Annotated[TrainingService, Depends(get_training_service)]


def handle_training_error(error: TrainingError) -> HTTPException:
    """Convert training errors to HTTP exceptions."""
    status_map = {
        "module_not_configured": status.HTTP_409_CONFLICT,
        "module_locked": status.HTTP_403_FORBIDDEN,
        "quiz_not_accessible": status.HTTP_409_CONFLICT,
        "no_active_quiz": status.HTTP_404_NOT_FOUND,
        "quiz_finished": status.HTTP_409_CONFLICT,
        "invalid_answer": status.HTTP_422_UNPROCESSABLE_ENTITY,
        "gateway_read_failure": status.HTTP_503_SERVICE_UNAVAILABLE,
        "gateway_write_failure": status.HTTP_503_SERVICE_UNAVAILABLE,
        "quiz_session_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error.message,
    )
