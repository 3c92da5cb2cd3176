"""FastAPI dependencies for the training catalog."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import CatalogError, CatalogService


async def get_catalog_service(request: Request) -> CatalogService:
    """Get catalog service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "catalog_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Catalog service not available",
        )
    return app_state.catalog_service


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]


def handle_catalog_error(error: CatalogError) -> HTTPException:
    """Convert catalog errors to HTTP exceptions."""
    status_map = {
        "module_not_found": status.HTTP_404_NOT_FOUND,
        "invalid_reorder": status.HTTP_422_UNPROCESSABLE_ENTITY,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error.message,
    )
