"""FastAPI dependencies for admin reports."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import ReportService


async def get_report_service(request: Request) -> ReportService:
    """Get report service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "report_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Report service not available",
        )
    return app_state.report_service


ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
